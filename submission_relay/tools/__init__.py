# Shared Tools
"""
Tool implementations for the relay pipeline.

Every tool takes its client as an argument; client construction lives
in submission_relay.tools.clients.
"""

from submission_relay.tools.link_validator import (
    LinkCheck,
    LinkCheckReason,
    probe_url,
    validate_url,
)
from submission_relay.tools.stream_relay import (
    RelayOptions,
    TransferResult,
    relay_url_to_bucket,
)
from submission_relay.tools.email import (
    build_email_message,
    send_email,
)
from submission_relay.tools.dynamodb import record_status

__all__ = [
    # Link validation
    "LinkCheck",
    "LinkCheckReason",
    "probe_url",
    "validate_url",
    # Stream relay
    "RelayOptions",
    "TransferResult",
    "relay_url_to_bucket",
    # Email tools
    "build_email_message",
    "send_email",
    # DynamoDB tools
    "record_status",
]
