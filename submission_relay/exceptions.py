"""
Custom Exceptions for the Submission Relay

Every component raises a RelayError subclass tagged with an ErrorKind.
The orchestrator selects the user-facing failure message from the kind.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Classification of pipeline failures."""

    INVALID_URL = "InvalidUrl"
    TRANSFER_FAILURE = "TransferFailure"
    NOTIFY_FAILURE = "NotifyFailure"
    AUDIT_FAILURE = "AuditFailure"
    INVALID_EVENT = "InvalidEvent"
    INVALID_CREDENTIALS = "InvalidCredentials"
    INTERNAL = "Internal"


class RelayError(Exception):
    """Base exception for the submission relay."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind | None = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.context = context
        if kind is not None:
            self.kind = kind
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


@dataclass
class InvalidUrlError(RelayError):
    """Submitted URL failed shape or accessibility checks."""

    url: str
    reason: str

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        # Wording is kept stable; operators grep for it in logs.
        super().__init__(
            "URL is not accessible",
            kind=ErrorKind.INVALID_URL,
            url=url,
            reason=reason,
        )


@dataclass
class TransferError(RelayError):
    """Streaming copy from source URL to the destination bucket failed."""

    url: str
    destination: str
    side: str  # "read", "write"

    def __init__(
        self,
        url: str,
        destination: str,
        side: str,
        error_message: str | None = None,
    ) -> None:
        self.url = url
        self.destination = destination
        self.side = side
        super().__init__(
            f"Transfer to '{destination}' failed on {side} side: "
            f"{error_message or 'Unknown error'}",
            kind=ErrorKind.TRANSFER_FAILURE,
            url=url,
            destination=destination,
            side=side,
        )


class TransferCancelledError(TransferError):
    """Transfer was cancelled by the caller before completion."""

    def __init__(self, url: str, destination: str) -> None:
        super().__init__(url, destination, "read", "cancelled")


@dataclass
class NotificationError(RelayError):
    """Email notification could not be sent."""

    recipient: str

    def __init__(self, recipient: str, error_message: str | None = None) -> None:
        self.recipient = recipient
        super().__init__(
            f"Email send failed for {recipient}: {error_message or 'Unknown error'}",
            kind=ErrorKind.NOTIFY_FAILURE,
            recipient=recipient,
        )


@dataclass
class AuditRecordError(RelayError):
    """Audit record write failed."""

    table_name: str

    def __init__(self, table_name: str, error_message: str | None = None) -> None:
        self.table_name = table_name
        super().__init__(
            f"Audit write failed on table '{table_name}': {error_message or 'Unknown error'}",
            kind=ErrorKind.AUDIT_FAILURE,
            table_name=table_name,
        )


class EventParseError(RelayError):
    """Inbound notification could not be decoded into a submission."""

    def __init__(self, error_message: str) -> None:
        super().__init__(
            f"Invalid submission event: {error_message}",
            kind=ErrorKind.INVALID_EVENT,
        )


class CredentialsError(RelayError):
    """Credential payload is missing or cannot be decoded."""

    def __init__(self, name: str, error_message: str) -> None:
        super().__init__(
            f"Invalid {name} credentials: {error_message}",
            kind=ErrorKind.INVALID_CREDENTIALS,
            name=name,
        )


@dataclass
class InvalidStageTransitionError(RelayError):
    """Attempted pipeline stage change not allowed by the transition table."""

    current_stage: str
    new_stage: str
    allowed_transitions: list[str]

    def __init__(
        self,
        current_stage: str,
        new_stage: str,
        allowed_transitions: list[str],
    ) -> None:
        self.current_stage = current_stage
        self.new_stage = new_stage
        self.allowed_transitions = allowed_transitions
        super().__init__(
            f"Cannot transition from '{current_stage}' to '{new_stage}'. "
            f"Allowed transitions: {allowed_transitions}",
            current_stage=current_stage,
            new_stage=new_stage,
            allowed_transitions=allowed_transitions,
        )
