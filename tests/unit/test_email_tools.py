"""
Unit tests for the notifier.

Tests cover:
- Message construction (sender identity, HTML wrapping)
- SES send parameters and error propagation
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from submission_relay.exceptions import ErrorKind, NotificationError
from submission_relay.models.email import SUCCESS_SUBJECT
from submission_relay.tools.email import (
    build_email_message,
    format_sender,
    render_html,
    send_email,
)
from tests.fixtures.aws_resources import sent_email_count


class TestBuildEmailMessage:
    """Tests for build_email_message."""

    def test_fixed_sender_identity(self, settings):
        message = build_email_message(
            "student@example.com", SUCCESS_SUBJECT, "All good", settings=settings
        )

        assert message.sender == "No Reply <noreply@gecoding.me>"
        assert message.to == ["student@example.com"]
        assert message.subject == "Download and Upload Successful"
        assert message.text == "All good"
        assert message.html == "<html><body><p>All good</p></body></html>"

    def test_html_body_is_escaped(self):
        html = render_html("url: https://x/y?a=1&b=<2>")

        assert "&amp;" in html
        assert "&lt;2&gt;" in html
        assert html.startswith("<html><body><p>")

    def test_sender_without_display_name(self):
        assert format_sender("noreply@gecoding.me") == "noreply@gecoding.me"


class TestSendEmail:
    """Tests for send_email."""

    def _message(self, settings):
        return build_email_message(
            "student@example.com", "Submission Error", "Something failed", settings=settings
        )

    def test_send_text_and_html(self, settings):
        client = MagicMock()
        client.send_email.return_value = {"MessageId": "msg-12345"}

        message_id = send_email(client, self._message(settings))

        assert message_id == "msg-12345"
        call_kwargs = client.send_email.call_args[1]
        assert call_kwargs["Source"] == "No Reply <noreply@gecoding.me>"
        assert call_kwargs["Destination"]["ToAddresses"] == ["student@example.com"]
        assert call_kwargs["Message"]["Subject"]["Data"] == "Submission Error"
        assert call_kwargs["Message"]["Body"]["Text"]["Data"] == "Something failed"
        assert "Html" in call_kwargs["Message"]["Body"]
        assert "ConfigurationSetName" not in call_kwargs

    def test_send_with_configuration_set(self, settings):
        client = MagicMock()
        client.send_email.return_value = {"MessageId": "msg-1"}

        send_email(client, self._message(settings), configuration_set="relay-emails")

        assert client.send_email.call_args[1]["ConfigurationSetName"] == "relay-emails"

    def test_client_error_raises_notification_error(self, settings):
        client = MagicMock()
        client.send_email.side_effect = ClientError(
            {"Error": {"Code": "MessageRejected", "Message": "Email address is not verified."}},
            "SendEmail",
        )

        with pytest.raises(NotificationError) as exc_info:
            send_email(client, self._message(settings))

        assert exc_info.value.kind is ErrorKind.NOTIFY_FAILURE
        assert exc_info.value.recipient == "student@example.com"
        assert "MessageRejected" in exc_info.value.message

    def test_connection_error_raises_notification_error(self, settings):
        client = MagicMock()
        client.send_email.side_effect = EndpointConnectionError(
            endpoint_url="https://email.us-east-1.amazonaws.com"
        )

        with pytest.raises(NotificationError):
            send_email(client, self._message(settings))

    def test_send_through_moto(self, mock_ses, settings):
        message_id = send_email(mock_ses, self._message(settings))

        assert message_id
        assert sent_email_count(mock_ses) == 1

    def test_unverified_sender_is_rejected(self, aws_credentials, settings):
        import boto3
        from moto import mock_aws

        with mock_aws():
            ses = boto3.client("ses", **aws_credentials)

            with pytest.raises(NotificationError):
                send_email(ses, self._message(settings))
