# Shared Models
"""
Pydantic models for submission events, audit records, emails and credentials.
"""

from submission_relay.models.audit import AuditRecord, AuditStatus
from submission_relay.models.credentials import ServiceCredentials, decode_credentials
from submission_relay.models.email import FAILURE_SUBJECT, SUCCESS_SUBJECT, EmailMessage
from submission_relay.models.events import SubmissionEvent, parse_submission_event

__all__ = [
    # Events
    "SubmissionEvent",
    "parse_submission_event",
    # Audit
    "AuditRecord",
    "AuditStatus",
    # Email
    "EmailMessage",
    "SUCCESS_SUBJECT",
    "FAILURE_SUBJECT",
    # Credentials
    "ServiceCredentials",
    "decode_credentials",
]
