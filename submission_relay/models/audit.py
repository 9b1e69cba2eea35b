"""
Audit Models

Append-only record written once per relay invocation.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class AuditStatus(str, Enum):
    """Final outcome of one invocation."""

    SUCCESS = "Success"
    FAILURE = "Failure"


class AuditRecord(BaseModel):
    """
    Audit row stored in DynamoDB.

    The id is a fresh UUID4 so two invocations for the same user in the
    same instant never collide.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()), description="Record identifier")
    email: str = Field(..., description="Recipient of the outcome email")
    status: AuditStatus = Field(..., description="Invocation outcome")
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="ISO-8601 UTC time the record was created",
    )

    @classmethod
    def create(
        cls,
        email: str,
        status: AuditStatus | str,
        *,
        now: datetime | None = None,
    ) -> "AuditRecord":
        """Build a new record, optionally pinned to a given time."""
        fields: dict[str, Any] = {"email": email, "status": AuditStatus(status)}
        if now is not None:
            if now.tzinfo is None:
                now = now.replace(tzinfo=timezone.utc)
            fields["timestamp"] = now.astimezone(timezone.utc).isoformat()
        return cls(**fields)

    def to_dynamodb(self) -> dict[str, Any]:
        """Convert to DynamoDB item."""
        return {
            "id": self.id,
            "email": self.email,
            "status": self.status.value,
            "timestamp": self.timestamp,
        }
