# Submission Relay
"""
Shared infrastructure for the submission relay Lambda.

This package provides:
- Pipeline stage definitions (PipelineStage, valid transitions)
- Pydantic models for submission events, audit records and emails
- Tool implementations for link validation, S3 streaming, SES and DynamoDB
- Configuration management
- Custom exceptions tagged with an ErrorKind
"""

from submission_relay.state_machine import PipelineStage, VALID_TRANSITIONS, validate_transition
from submission_relay.exceptions import (
    ErrorKind,
    RelayError,
    InvalidUrlError,
    TransferError,
    TransferCancelledError,
    NotificationError,
    AuditRecordError,
    EventParseError,
    CredentialsError,
)
from submission_relay.config import Settings, get_settings

__all__ = [
    # State machine
    "PipelineStage",
    "VALID_TRANSITIONS",
    "validate_transition",
    # Exceptions
    "ErrorKind",
    "RelayError",
    "InvalidUrlError",
    "TransferError",
    "TransferCancelledError",
    "NotificationError",
    "AuditRecordError",
    "EventParseError",
    "CredentialsError",
    # Config
    "Settings",
    "get_settings",
]
