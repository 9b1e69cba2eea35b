"""
RelaySubmission Lambda

Triggered by submission notifications over SNS. Streams the submitted
archive into the destination bucket, emails the submitter and appends
an audit record.

Trigger: SNS topic
Output: S3 object, SES email, DynamoDB audit row
"""

from lambdas.relay_submission.handler import lambda_handler
from lambdas.relay_submission.pipeline import (
    RelayContext,
    RelayOutcome,
    build_context,
    process_submission,
    select_failure_message,
)

__all__ = [
    "lambda_handler",
    "RelayContext",
    "RelayOutcome",
    "build_context",
    "process_submission",
    "select_failure_message",
]
