"""
Credential Models

Credentials are configured as base64-encoded JSON and decoded fresh on
every invocation. Decoded values are never logged.
"""

import base64
import binascii
import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

from submission_relay.exceptions import CredentialsError


class ServiceCredentials(BaseModel):
    """Static AWS-style key pair for a single client."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    aws_access_key_id: str = Field(..., min_length=1)
    aws_secret_access_key: SecretStr
    aws_session_token: SecretStr | None = None
    region_name: str | None = None

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for boto3 client/resource construction."""
        kwargs: dict[str, Any] = {
            "aws_access_key_id": self.aws_access_key_id,
            "aws_secret_access_key": self.aws_secret_access_key.get_secret_value(),
        }
        if self.aws_session_token is not None:
            kwargs["aws_session_token"] = self.aws_session_token.get_secret_value()
        if self.region_name:
            kwargs["region_name"] = self.region_name
        return kwargs


def decode_credentials(encoded: str | None, *, name: str) -> ServiceCredentials:
    """
    Decode a base64 JSON credential payload.

    Args:
        encoded: Base64 string as stored in configuration
        name: Which credential this is, for error messages

    Returns:
        ServiceCredentials

    Raises:
        CredentialsError: If the payload is missing or malformed
    """
    if not encoded:
        raise CredentialsError(name, "not configured")

    try:
        raw = base64.b64decode(encoded.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise CredentialsError(name, "payload is not valid base64") from e

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CredentialsError(name, "payload is not valid JSON") from e

    if not isinstance(payload, dict):
        raise CredentialsError(name, "payload must be a JSON object")

    try:
        return ServiceCredentials.model_validate(payload)
    except ValidationError as e:
        missing = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise CredentialsError(name, f"invalid fields: {', '.join(missing)}") from e
