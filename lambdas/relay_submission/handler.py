"""
RelaySubmission Lambda Handler

Main entry point for submission notifications. Decodes the SNS envelope
and runs the relay pipeline.

Trigger: SNS topic carrying submission notifications
Output: Archive in the destination bucket, outcome email, audit record

Flow:
1. Parse SNS notification into a SubmissionEvent
2. Build per-invocation clients (credentials decoded fresh)
3. Validate link, stream archive into the bucket
4. Email the submitter
5. Append an audit record
"""

import logging
import threading
import time
from typing import Any

import structlog

from lambdas.relay_submission.pipeline import (
    RelayOutcome,
    build_context,
    process_submission,
)
from submission_relay.config import get_settings
from submission_relay.exceptions import EventParseError
from submission_relay.models.events import parse_submission_event

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

log = structlog.get_logger()

# Time left for the failure email and audit write after a cancelled transfer
CANCEL_MARGIN_MS = 15_000


def _configure_log_level(level: str) -> None:
    logging.basicConfig(format="%(message)s")
    logging.getLogger().setLevel(level)


def _arm_cancel_timer(context: Any, cancel_event: threading.Event) -> threading.Timer | None:
    """Cancel the transfer shortly before the Lambda would be killed."""
    get_remaining = getattr(context, "get_remaining_time_in_millis", None)
    if get_remaining is None:
        return None

    remaining_ms = get_remaining()
    delay_s = max(remaining_ms - CANCEL_MARGIN_MS, 0) / 1000
    timer = threading.Timer(delay_s, cancel_event.set)
    timer.daemon = True
    timer.start()
    return timer


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    AWS Lambda entry point for submission relay.

    Args:
        event: SNS notification (or direct submission payload)
        context: Lambda execution context

    Returns:
        {"status": "Process Complete"} or {"status": "Error", "message": ...}
    """
    start_time = time.time()
    settings = get_settings()
    _configure_log_level(settings.log_level)

    log.info(
        "lambda_invoked",
        request_id=getattr(context, "aws_request_id", "local"),
        event_type="sns" if isinstance(event, dict) and "Records" in event else "direct",
    )

    try:
        submission = parse_submission_event(event)
    except EventParseError as e:
        # No trustworthy recipient, so nothing to notify or audit.
        log.error("invalid_submission_event", error=e.message)
        return RelayOutcome.error(e.message).to_dict()

    ctx = build_context(settings)
    timer = _arm_cancel_timer(context, ctx.cancel_event)

    try:
        outcome = process_submission(submission, ctx)
    finally:
        if timer is not None:
            timer.cancel()
        ctx.close()

    log.info(
        "lambda_completed",
        status=outcome.status,
        user_email=submission.user_email,
        assignment_id=submission.assignment_id,
        duration_ms=int((time.time() - start_time) * 1000),
    )

    return outcome.to_dict()
