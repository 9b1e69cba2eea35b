"""
Event Models

Pydantic model for the submission notification delivered over SNS,
plus envelope decoding for the shapes the Lambda can be invoked with.
"""

import json
from typing import Any

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from submission_relay.exceptions import EventParseError


class SubmissionEvent(BaseModel):
    """
    A user's assignment submission.

    Wire field names are camelCase; snake_case names are accepted too.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    submission_url: str = Field(
        ...,
        alias="submissionUrl",
        min_length=1,
        description="Download link of the submitted archive",
    )
    user_email: str = Field(
        ...,
        alias="userEmail",
        min_length=3,
        description="Submitter's email address",
    )
    submission_count: int = Field(
        ...,
        alias="submissionCount",
        ge=0,
        description="Attempt number for this assignment",
    )
    assignment_id: str = Field(
        ...,
        alias="assignmentId",
        min_length=1,
        description="Assignment identifier",
    )

    @field_validator("submission_url", "user_email", "assignment_id")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()

    @field_validator("user_email")
    @classmethod
    def validate_user_email(cls, v: str) -> str:
        # Syntax check only; the address is kept verbatim since it
        # forms part of the destination key.
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email address: {v!r}") from e
        return v

    @property
    def destination_key(self) -> str:
        """Object key the archive is stored under."""
        return (
            f"{self.user_email}/{self.assignment_id}/"
            f"submission_{self.submission_count}.zip"
        )


def _extract_message(event: dict[str, Any]) -> Any:
    """Pull the submission payload out of the supported envelope shapes."""
    # SNS Lambda trigger format
    if "Records" in event:
        records = event["Records"]
        if not isinstance(records, list):
            raise EventParseError("Records in SNS event must be a list")
        if not records:
            raise EventParseError("Empty Records in SNS event")

        record = records[0]
        if not isinstance(record, dict):
            raise EventParseError("SNS record must be a JSON object")

        source = record.get("EventSource") or record.get("eventSource")
        if source and source != "aws:sns":
            raise EventParseError(f"Unexpected event source: {source}")

        sns = record.get("Sns")
        if not isinstance(sns, dict):
            raise EventParseError("No Sns notification in record")

        message = sns.get("Message")
        if not message:
            raise EventParseError("No Message in SNS notification")
        return message

    # Direct SNS message format
    if "Message" in event:
        return event["Message"]

    # Bare submission payload (local invocation)
    return event


def parse_submission_event(event: dict[str, Any]) -> SubmissionEvent:
    """
    Decode an inbound Lambda event into a SubmissionEvent.

    Args:
        event: SNS envelope, direct SNS message or bare submission dict

    Returns:
        Parsed, immutable SubmissionEvent

    Raises:
        EventParseError: If the envelope or payload is malformed
    """
    if not isinstance(event, dict):
        raise EventParseError(f"Expected a JSON object, got {type(event).__name__}")

    message = _extract_message(event)

    if isinstance(message, str):
        try:
            message = json.loads(message)
        except json.JSONDecodeError as e:
            raise EventParseError(f"Message is not valid JSON: {e.msg}") from e

    if not isinstance(message, dict):
        raise EventParseError("Message payload must be a JSON object")

    try:
        return SubmissionEvent.model_validate(message)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise EventParseError(f"Invalid fields: {', '.join(fields)}") from e
