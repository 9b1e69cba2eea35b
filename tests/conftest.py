"""
Pytest Configuration and Shared Fixtures

Provides moto AWS mocking, sample submission events, and test utilities.
"""

import os
from typing import Any

import boto3
import pytest
from moto import mock_aws

from tests.fixtures.aws_resources import (
    TEST_AUDIT_TABLE,
    TEST_BUCKET,
    TEST_REGION,
    TEST_SENDER_DOMAIN,
    create_audit_table,
)
from tests.utils.event_generator import (
    encode_credentials,
    make_sns_event,
    make_submission_payload,
)

TEST_STORAGE_CREDENTIALS = encode_credentials({
    "aws_access_key_id": "testing",
    "aws_secret_access_key": "testing",
})

# Set test environment before importing application modules
os.environ["RELAY_STORAGE_BUCKET_NAME"] = TEST_BUCKET
os.environ["RELAY_STORAGE_CREDENTIALS"] = TEST_STORAGE_CREDENTIALS
os.environ["RELAY_AUDIT_TABLE_NAME"] = TEST_AUDIT_TABLE
os.environ["RELAY_AWS_REGION"] = TEST_REGION
os.environ["AWS_DEFAULT_REGION"] = TEST_REGION
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"


# --- Settings Fixtures ---


@pytest.fixture
def settings():
    """Fresh settings built from the test environment."""
    from submission_relay.config import Settings, get_settings

    get_settings.cache_clear()
    yield Settings()
    get_settings.cache_clear()


# --- AWS Mocking Fixtures ---


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    return {
        "aws_access_key_id": "testing",
        "aws_secret_access_key": "testing",
        "region_name": TEST_REGION,
    }


@pytest.fixture
def mock_s3(aws_credentials):
    """Create a mocked S3 bucket."""
    with mock_aws():
        s3 = boto3.client("s3", **aws_credentials)
        s3.create_bucket(Bucket=TEST_BUCKET)
        yield s3


@pytest.fixture
def mock_ses(aws_credentials):
    """Create a mocked SES client with the sender domain verified."""
    with mock_aws():
        ses = boto3.client("ses", **aws_credentials)
        ses.verify_domain_identity(Domain=TEST_SENDER_DOMAIN)
        yield ses


@pytest.fixture
def mock_dynamodb(aws_credentials):
    """Create a mocked audit table."""
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", **aws_credentials)
        yield create_audit_table(dynamodb)


@pytest.fixture
def mock_aws_all(aws_credentials):
    """
    Mock all AWS services used by the relay.

    Provides a complete mocked AWS environment.
    """
    with mock_aws():
        s3 = boto3.client("s3", **aws_credentials)
        s3.create_bucket(Bucket=TEST_BUCKET)

        ses = boto3.client("ses", **aws_credentials)
        ses.verify_domain_identity(Domain=TEST_SENDER_DOMAIN)

        dynamodb = boto3.resource("dynamodb", **aws_credentials)
        table = create_audit_table(dynamodb)

        yield {
            "s3": s3,
            "ses": ses,
            "table": table,
        }


# --- Submission Fixtures ---


@pytest.fixture
def submission_payload() -> dict[str, Any]:
    """Sample submission message."""
    return make_submission_payload(count=2)


@pytest.fixture
def sns_event(submission_payload: dict[str, Any]) -> dict[str, Any]:
    """Sample SNS envelope carrying a submission."""
    return make_sns_event(submission_payload)


@pytest.fixture
def submission(submission_payload: dict[str, Any]):
    """Parsed sample submission."""
    from submission_relay.models.events import SubmissionEvent

    return SubmissionEvent.model_validate(submission_payload)
