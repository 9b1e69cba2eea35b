"""
Email Tools

Builds and sends outcome notifications through SES.
"""

import html

from botocore.exceptions import BotoCoreError, ClientError
import structlog

from submission_relay.config import Settings
from submission_relay.exceptions import NotificationError
from submission_relay.models.email import EmailMessage

log = structlog.get_logger()


def format_sender(from_address: str, from_name: str | None = None) -> str:
    """Format the From header with an optional display name."""
    if from_name:
        return f"{from_name} <{from_address}>"
    return from_address


def render_html(body_text: str) -> str:
    """Wrap plain text in a minimal HTML document."""
    return f"<html><body><p>{html.escape(body_text)}</p></body></html>"


def build_email_message(
    to_address: str,
    subject: str,
    body_text: str,
    *,
    settings: Settings,
) -> EmailMessage:
    """
    Build a notification from the fixed sender identity.

    Args:
        to_address: Recipient email address
        subject: Email subject
        body_text: Plain text body, also rendered as HTML
        settings: Source of the sender address and display name

    Returns:
        EmailMessage ready to send
    """
    return EmailMessage(
        sender=format_sender(settings.ses_from_address, settings.ses_from_name),
        to=[to_address],
        subject=subject,
        text=body_text,
        html=render_html(body_text),
    )


def send_email(
    ses_client,
    message: EmailMessage,
    *,
    configuration_set: str | None = None,
) -> str:
    """
    Send an email via SES.

    Args:
        ses_client: boto3 SES client
        message: Message to send
        configuration_set: Optional SES configuration set

    Returns:
        SES message ID

    Raises:
        NotificationError: If send fails
    """
    recipient = ", ".join(message.to)

    send_params = {
        "Source": message.sender,
        "Destination": {"ToAddresses": list(message.to)},
        "Message": {
            "Subject": {"Data": message.subject, "Charset": "UTF-8"},
            "Body": {
                "Text": {"Data": message.text, "Charset": "UTF-8"},
                "Html": {"Data": message.html, "Charset": "UTF-8"},
            },
        },
    }

    if configuration_set:
        send_params["ConfigurationSetName"] = configuration_set

    log.info(
        "sending_ses_email",
        to=recipient,
        subject=message.subject[:50],
    )

    try:
        response = ses_client.send_email(**send_params)
    except ClientError as e:
        error_code = e.response["Error"]["Code"]
        error_message = e.response["Error"]["Message"]

        log.error(
            "ses_send_failed",
            to=recipient,
            error_code=error_code,
            error_message=error_message,
        )

        raise NotificationError(
            recipient=recipient,
            error_message=f"{error_code}: {error_message}",
        ) from e
    except BotoCoreError as e:
        log.error("ses_send_failed", to=recipient, error_message=str(e))
        raise NotificationError(recipient=recipient, error_message=str(e)) from e

    message_id = response["MessageId"]

    log.info(
        "ses_email_sent",
        message_id=message_id,
        to=recipient,
    )

    return message_id
