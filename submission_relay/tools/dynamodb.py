"""
DynamoDB Tools

Write-only audit trail: one row per relay invocation.
"""

from datetime import datetime

from botocore.exceptions import BotoCoreError, ClientError
import structlog

from submission_relay.exceptions import AuditRecordError
from submission_relay.models.audit import AuditRecord, AuditStatus

log = structlog.get_logger()


def record_status(
    table,
    email: str,
    status: AuditStatus | str,
    *,
    now: datetime | None = None,
) -> AuditRecord:
    """
    Append an audit record for an invocation outcome.

    Args:
        table: boto3 DynamoDB Table resource
        email: Recipient the outcome was reported to
        status: Success or Failure
        now: Override the record timestamp

    Returns:
        The AuditRecord that was written

    Raises:
        AuditRecordError: On DynamoDB operation failure
    """
    record = AuditRecord.create(email, status, now=now)

    log.info(
        "recording_audit_status",
        record_id=record.id,
        email=email,
        status=record.status.value,
    )

    try:
        table.put_item(Item=record.to_dynamodb())
    except (ClientError, BotoCoreError) as e:
        log.error(
            "dynamodb_put_failed",
            record_id=record.id,
            email=email,
            error=str(e),
        )
        raise AuditRecordError(
            table_name=table.name,
            error_message=str(e),
        ) from e

    log.info("audit_status_recorded", record_id=record.id)

    return record
