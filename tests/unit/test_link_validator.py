"""
Unit tests for the link validator.

Tests cover:
- Suffix check short-circuits before any network call
- HEAD probe status / content type acceptance
- Network errors reported as unreachable, never raised
"""

import pytest
import requests

from submission_relay.tools.link_validator import (
    LinkCheckReason,
    has_expected_suffix,
    probe_url,
    validate_url,
)
from tests.mocks.mock_http import MockHttpSession, MockResponse


ZIP_URL = "https://x/y/file.zip"


class TestSuffixCheck:
    """Tests for has_expected_suffix."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://x/y/file.txt",
            "https://x/y/file.zip.txt",
            "https://x/y/",
            "https://x/y/filezip",
            "https://x/y/file.ZIP",
        ],
    )
    def test_rejects_non_zip_paths(self, url):
        assert has_expected_suffix(url) is False

    def test_accepts_zip_path(self):
        assert has_expected_suffix(ZIP_URL) is True

    def test_query_string_is_ignored(self):
        """The suffix is checked on the path, not the whole URL."""
        assert has_expected_suffix("https://x/y/file.zip?token=abc") is True
        assert has_expected_suffix("https://x/y/file?name=a.zip") is False


class TestProbeUrl:
    """Tests for probe_url / validate_url."""

    @pytest.mark.parametrize(
        "url",
        ["https://x/y/file.txt", "https://x/y/archive.tar.gz", "not a url"],
    )
    def test_wrong_suffix_makes_no_network_call(self, url):
        session = MockHttpSession()

        check = probe_url(url, session=session)

        assert check.ok is False
        assert check.reason is LinkCheckReason.WRONG_SUFFIX
        assert session.calls == []
        assert validate_url(url, session=session) is False
        assert session.calls == []

    def test_accepts_200_zip(self):
        session = MockHttpSession(
            head=MockResponse(200, {"Content-Type": "application/zip", "Content-Length": "42"})
        )

        check = probe_url(ZIP_URL, session=session, timeout=(1.0, 2.0))

        assert check.ok is True
        assert check.status_code == 200
        assert check.content_type == "application/zip"
        assert session.methods == ["HEAD"]
        assert session.calls[0]["allow_redirects"] is True
        assert session.calls[0]["timeout"] == (1.0, 2.0)

    @pytest.mark.parametrize("status", [201, 204, 301, 403, 404, 500])
    def test_rejects_non_200_status(self, status):
        session = MockHttpSession(head=MockResponse(status, {"Content-Type": "application/zip"}))

        check = probe_url(ZIP_URL, session=session)

        assert check.ok is False
        assert check.reason is LinkCheckReason.UNEXPECTED_STATUS
        assert check.status_code == status

    @pytest.mark.parametrize(
        "content_type",
        [
            "application/octet-stream",
            "text/html",
            "application/zip; charset=binary",
            "application/x-zip-compressed",
            None,
        ],
    )
    def test_rejects_other_content_types(self, content_type):
        headers = {"Content-Type": content_type} if content_type else {}
        session = MockHttpSession(head=MockResponse(200, headers))

        check = probe_url(ZIP_URL, session=session)

        assert check.ok is False
        assert check.reason is LinkCheckReason.WRONG_CONTENT_TYPE
        assert validate_url(ZIP_URL, session=session) is False

    @pytest.mark.parametrize(
        "error",
        [
            requests.ConnectionError("DNS failure"),
            requests.Timeout("timed out"),
            requests.exceptions.TooManyRedirects("loop"),
        ],
    )
    def test_network_errors_are_unreachable(self, error):
        session = MockHttpSession(head=error)

        check = probe_url(ZIP_URL, session=session)

        assert check.ok is False
        assert check.reason is LinkCheckReason.UNREACHABLE
        assert check.status_code is None
