"""
Link Validator

Checks that a submitted download link looks like a zip archive and is
live, using a HEAD probe. Never raises on network failure; the outcome
is reported as a LinkCheck and logged with a distinct event per reason.
"""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

import requests
import structlog

log = structlog.get_logger()

EXPECTED_SUFFIX = ".zip"
EXPECTED_CONTENT_TYPE = "application/zip"

DEFAULT_TIMEOUT: tuple[float, float] = (5.0, 30.0)


class LinkCheckReason(str, Enum):
    """Why a link was accepted or rejected."""

    OK = "ok"
    WRONG_SUFFIX = "wrong_suffix"
    UNEXPECTED_STATUS = "unexpected_status"
    WRONG_CONTENT_TYPE = "wrong_content_type"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class LinkCheck:
    """Outcome of probing a submission link."""

    url: str
    reason: LinkCheckReason
    status_code: int | None = None
    content_type: str | None = None

    @property
    def ok(self) -> bool:
        return self.reason is LinkCheckReason.OK


def has_expected_suffix(url: str) -> bool:
    """True if the URL path ends with the archive suffix."""
    try:
        path = urlparse(url).path
    except ValueError:
        return False
    return path.endswith(EXPECTED_SUFFIX)


def probe_url(
    url: str,
    *,
    session: requests.Session,
    timeout: tuple[float, float] = DEFAULT_TIMEOUT,
) -> LinkCheck:
    """
    Probe a submission link.

    A URL whose path does not end with .zip is rejected without any
    network call. Otherwise a HEAD request is issued (redirects followed)
    and the link is accepted only on status 200 with Content-Type
    application/zip.

    Args:
        url: Submitted download link
        session: HTTP session to issue the probe with
        timeout: (connect, read) timeout in seconds

    Returns:
        LinkCheck describing the outcome
    """
    if not has_expected_suffix(url):
        log.warning("url_wrong_suffix", url=url, expected_suffix=EXPECTED_SUFFIX)
        return LinkCheck(url=url, reason=LinkCheckReason.WRONG_SUFFIX)

    try:
        response = session.head(url, allow_redirects=True, timeout=timeout)
    except requests.RequestException as e:
        log.warning(
            "url_unreachable",
            url=url,
            error=str(e),
            error_type=type(e).__name__,
        )
        return LinkCheck(url=url, reason=LinkCheckReason.UNREACHABLE)

    status_code = response.status_code
    content_type = response.headers.get("Content-Type")

    if status_code != 200:
        log.warning("url_unexpected_status", url=url, status_code=status_code)
        return LinkCheck(
            url=url,
            reason=LinkCheckReason.UNEXPECTED_STATUS,
            status_code=status_code,
            content_type=content_type,
        )

    if content_type != EXPECTED_CONTENT_TYPE:
        log.warning(
            "url_wrong_content_type",
            url=url,
            content_type=content_type,
            expected_content_type=EXPECTED_CONTENT_TYPE,
        )
        return LinkCheck(
            url=url,
            reason=LinkCheckReason.WRONG_CONTENT_TYPE,
            status_code=status_code,
            content_type=content_type,
        )

    log.info(
        "url_accessible",
        url=url,
        content_length=response.headers.get("Content-Length"),
    )
    return LinkCheck(
        url=url,
        reason=LinkCheckReason.OK,
        status_code=status_code,
        content_type=content_type,
    )


def validate_url(
    url: str,
    *,
    session: requests.Session,
    timeout: tuple[float, float] = DEFAULT_TIMEOUT,
) -> bool:
    """Return True if the link is a reachable zip archive."""
    return probe_url(url, session=session, timeout=timeout).ok
