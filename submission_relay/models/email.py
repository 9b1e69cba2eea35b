"""
Email Models

Outbound notification message, built and discarded per invocation.
"""

from pydantic import BaseModel, ConfigDict, Field


SUCCESS_SUBJECT = "Download and Upload Successful"
FAILURE_SUBJECT = "Submission Error"


class EmailMessage(BaseModel):
    """Plain-text + HTML email addressed to a single recipient."""

    model_config = ConfigDict(frozen=True)

    sender: str = Field(..., description="Formatted From header")
    to: list[str] = Field(..., min_length=1, description="Recipients")
    subject: str = Field(..., description="Subject line")
    text: str = Field(..., description="Plain text body")
    html: str = Field(..., description="HTML body")
