"""
Client Factories

Construct the boto3 and HTTP clients one invocation uses. Nothing here
is cached; the pipeline builds a fresh set per invocation and passes
them to the tools explicitly.
"""

import boto3
import requests

from submission_relay.config import Settings
from submission_relay.models.credentials import ServiceCredentials

USER_AGENT = "submission-relay/1.0"


def _credential_kwargs(credentials: ServiceCredentials | None) -> dict:
    return credentials.client_kwargs() if credentials else {}


def get_s3_client(settings: Settings, credentials: ServiceCredentials | None = None):
    """Get S3 client, scoped to the given credentials when provided."""
    return boto3.client("s3", **{**settings.s3_config, **_credential_kwargs(credentials)})


def get_ses_client(settings: Settings, credentials: ServiceCredentials | None = None):
    """Get SES client."""
    return boto3.client("ses", **{**settings.ses_config, **_credential_kwargs(credentials)})


def get_audit_table(settings: Settings):
    """Get DynamoDB table resource for audit records."""
    dynamodb = boto3.resource("dynamodb", **settings.dynamodb_config)
    return dynamodb.Table(settings.audit_table_name)


def get_http_session() -> requests.Session:
    """Get HTTP session for link probes and downloads."""
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    return session
