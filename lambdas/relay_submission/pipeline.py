"""
Relay Pipeline

Sequences one submission through validate, download, upload, notify and
record. Every failure up to and including the Success audit write is
turned into a failure email plus a Failure audit record.

Clients are passed in through RelayContext; nothing here reaches for a
process-wide client.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Callable

import requests
import structlog

from submission_relay.config import Settings
from submission_relay.exceptions import (
    CredentialsError,
    ErrorKind,
    NotificationError,
    RelayError,
)
from submission_relay.models.audit import AuditStatus
from submission_relay.models.credentials import decode_credentials
from submission_relay.models.email import FAILURE_SUBJECT, SUCCESS_SUBJECT
from submission_relay.models.events import SubmissionEvent
from submission_relay.state_machine import PipelineStage, StageTracker
from submission_relay.tools.clients import (
    get_audit_table,
    get_http_session,
    get_s3_client,
    get_ses_client,
)
from submission_relay.tools.dynamodb import record_status
from submission_relay.tools.email import build_email_message, send_email
from submission_relay.tools.stream_relay import RelayOptions, relay_url_to_bucket

log = structlog.get_logger()

STATUS_COMPLETE = "Process Complete"
STATUS_ERROR = "Error"

_RELAY_STAGES = {
    "downloading": PipelineStage.DOWNLOADING,
    "uploading": PipelineStage.UPLOADING,
}


@dataclass(frozen=True)
class RelayOutcome:
    """Invocation result returned to the Lambda runtime."""

    status: str
    message: str | None = None

    @classmethod
    def complete(cls) -> "RelayOutcome":
        return cls(status=STATUS_COMPLETE)

    @classmethod
    def error(cls, message: str) -> "RelayOutcome":
        return cls(status=STATUS_ERROR, message=message)

    def to_dict(self) -> dict[str, Any]:
        if self.message is None:
            return {"status": self.status}
        return {"status": self.status, "message": self.message}


@dataclass
class RelayContext:
    """
    Per-invocation dependencies.

    Client factories are called lazily so credential decoding failures
    happen inside the pipeline and take the failure path.
    """

    settings: Settings
    http_session: requests.Session
    audit_table: Any
    storage_client_factory: Callable[[], Any]
    email_client_factory: Callable[[], Any]
    cancel_event: threading.Event = field(default_factory=threading.Event)

    @property
    def relay_options(self) -> RelayOptions:
        return RelayOptions(
            timeout=self.settings.http_timeout,
            chunk_size=self.settings.transfer_chunk_size,
            max_bytes=self.settings.transfer_max_bytes,
            deadline_seconds=self.settings.transfer_deadline_seconds,
        )

    def close(self) -> None:
        self.http_session.close()


def build_context(settings: Settings) -> RelayContext:
    """
    Build the clients for one invocation.

    Storage credentials are decoded each time the storage factory is
    called and are never cached between invocations.
    """

    def storage_client_factory():
        credentials = decode_credentials(settings.storage_credentials, name="storage")
        return get_s3_client(settings, credentials)

    def email_client_factory():
        credentials = None
        if settings.email_credentials:
            credentials = decode_credentials(settings.email_credentials, name="email")
        return get_ses_client(settings, credentials)

    return RelayContext(
        settings=settings,
        http_session=get_http_session(),
        audit_table=get_audit_table(settings),
        storage_client_factory=storage_client_factory,
        email_client_factory=email_client_factory,
    )


def error_kind(error: BaseException) -> ErrorKind:
    """Tagged kind of an error; untagged exceptions count as internal."""
    if isinstance(error, RelayError):
        return error.kind
    return ErrorKind.INTERNAL


def error_message(error: BaseException) -> str:
    if isinstance(error, RelayError):
        return error.message
    return str(error) or type(error).__name__


def success_body(submission: SubmissionEvent, bucket: str) -> str:
    return (
        f"Your file, assignment id: {submission.assignment_id}, has been downloaded "
        f"and uploaded successfully.\n"
        f"Filename stored in storage: {bucket}/{submission.destination_key}\n"
        f"\nYour submission url: {submission.submission_url}"
        f"\nYour number of attempts is {submission.submission_count}."
    )


def select_failure_message(error: BaseException, submission: SubmissionEvent) -> str:
    """Pick the user-facing failure text from the error kind."""
    if error_kind(error) is ErrorKind.INVALID_URL:
        return (
            f"Unfortunately, there was an issue in downloading or uploading your file, "
            f"assignment id: {submission.assignment_id}.\n"
            f"Please check the submitted URL and try again.\n"
            f"The URL submitted is invalid or the content is empty. "
            f"Please ensure to submit a valid URL that ends with .zip.\n"
            f"Your number of attempts is {submission.submission_count}."
        )
    return (
        f"An error occurred during file processing for the file: "
        f"{submission.destination_key}"
    )


def _notify(ctx: RelayContext, to_address: str, subject: str, body: str) -> str:
    try:
        ses_client = ctx.email_client_factory()
    except CredentialsError as e:
        raise NotificationError(recipient=to_address, error_message=e.message) from e

    message = build_email_message(to_address, subject, body, settings=ctx.settings)
    return send_email(
        ses_client,
        message,
        configuration_set=ctx.settings.ses_configuration_set,
    )


def process_submission(submission: SubmissionEvent, ctx: RelayContext) -> RelayOutcome:
    """
    Run the relay pipeline for one submission.

    Args:
        submission: Parsed submission event
        ctx: Per-invocation clients and settings

    Returns:
        RelayOutcome, complete or error

    Raises:
        NotificationError: If the failure email cannot be sent; no audit
            record is written in that case
        AuditRecordError: If the Failure audit write fails
    """
    settings = ctx.settings
    bucket = settings.storage_bucket_name
    key = submission.destination_key
    tracker = StageTracker(
        user_email=submission.user_email,
        assignment_id=submission.assignment_id,
    )
    bound_log = log.bind(
        user_email=submission.user_email,
        assignment_id=submission.assignment_id,
        submission_count=submission.submission_count,
    )

    bound_log.info("processing_submission", destination=f"{bucket}/{key}")

    try:
        s3_client = ctx.storage_client_factory()

        tracker.advance(PipelineStage.VALIDATING)
        result = relay_url_to_bucket(
            submission.submission_url,
            bucket,
            key,
            http_session=ctx.http_session,
            s3_client=s3_client,
            options=ctx.relay_options,
            cancel_event=ctx.cancel_event,
            on_stage=lambda name: tracker.advance(_RELAY_STAGES[name]),
        )

        tracker.advance(PipelineStage.NOTIFYING_SUCCESS)
        _notify(ctx, submission.user_email, SUCCESS_SUBJECT, success_body(submission, bucket))

        tracker.advance(PipelineStage.RECORDING_SUCCESS)
        record_status(ctx.audit_table, submission.user_email, AuditStatus.SUCCESS)
    except Exception as e:
        bound_log.exception(
            "submission_processing_failed",
            stage=tracker.stage.value,
            error_kind=error_kind(e).value,
            error=str(e),
        )
        return _fail(submission, ctx, tracker, e)

    tracker.advance(PipelineStage.DONE)

    bound_log.info(
        "submission_processed",
        s3_uri=result.s3_uri,
        bytes_transferred=result.bytes_transferred,
        duration_ms=result.duration_ms,
    )

    return RelayOutcome.complete()


def _fail(
    submission: SubmissionEvent,
    ctx: RelayContext,
    tracker: StageTracker,
    error: Exception,
) -> RelayOutcome:
    tracker.advance(PipelineStage.NOTIFYING_FAILURE)
    # A send failure here propagates and the audit write is skipped.
    _notify(
        ctx,
        submission.user_email,
        FAILURE_SUBJECT,
        select_failure_message(error, submission),
    )

    tracker.advance(PipelineStage.RECORDING_FAILURE)
    record_status(ctx.audit_table, submission.user_email, AuditStatus.FAILURE)
    tracker.advance(PipelineStage.FAILED)

    return RelayOutcome.error(error_message(error))
