"""
Stream Relay

Copies a validated archive from an HTTP URL into S3 without holding the
whole payload in memory. The response body is read chunk by chunk
through a bounded, cancellable file-like reader that boto3's managed
upload consumes directly.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterator

from boto3.exceptions import S3UploadFailedError
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError
import requests
import structlog

from submission_relay.exceptions import (
    InvalidUrlError,
    TransferCancelledError,
    TransferError,
)
from submission_relay.tools.link_validator import (
    DEFAULT_TIMEOUT,
    EXPECTED_CONTENT_TYPE,
    probe_url,
)

log = structlog.get_logger()

CHUNK_SIZE = 8 * 1024 * 1024  # Also used as the multipart part size
MAX_BYTES = 512 * 1024 * 1024
DEADLINE_SECONDS = 600.0


@dataclass(frozen=True)
class RelayOptions:
    """Bounds applied to a single transfer."""

    timeout: tuple[float, float] = DEFAULT_TIMEOUT
    chunk_size: int = CHUNK_SIZE
    max_bytes: int = MAX_BYTES
    deadline_seconds: float = DEADLINE_SECONDS


@dataclass(frozen=True)
class TransferResult:
    """Outcome of a completed relay."""

    bucket: str
    key: str
    bytes_transferred: int
    duration_ms: int

    @property
    def s3_uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


class _SourceReadError(Exception):
    """Raised by the reader so read-side failures stay distinguishable."""

    def __init__(self, message: str, *, cancelled: bool = False) -> None:
        self.cancelled = cancelled
        super().__init__(message)


class BoundedChunkReader:
    """
    Non-seekable file-like view over an iterator of byte chunks.

    Enforces a byte cap and a wall-clock deadline, and checks a cancel
    flag before every read.
    """

    def __init__(
        self,
        chunks: Iterator[bytes],
        *,
        max_bytes: int,
        deadline: float,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._chunks = chunks
        self._buffer = bytearray()
        self._exhausted = False
        self._max_bytes = max_bytes
        self._deadline = deadline
        self._cancel_event = cancel_event
        self.bytes_read = 0

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def _check_bounds(self) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise _SourceReadError("transfer cancelled", cancelled=True)
        if time.monotonic() > self._deadline:
            raise _SourceReadError("transfer deadline exceeded")

    def _fill(self, size: int) -> None:
        while not self._exhausted and (size < 0 or len(self._buffer) < size):
            self._check_bounds()
            try:
                chunk = next(self._chunks)
            except StopIteration:
                self._exhausted = True
                break
            except (requests.RequestException, OSError) as e:
                raise _SourceReadError(f"{type(e).__name__}: {e}") from e

            if not chunk:
                continue
            self.bytes_read += len(chunk)
            if self.bytes_read > self._max_bytes:
                raise _SourceReadError(
                    f"archive exceeds maximum size of {self._max_bytes} bytes"
                )
            self._buffer.extend(chunk)

    def read(self, size: int = -1) -> bytes:
        self._check_bounds()
        if size is None:
            size = -1
        self._fill(size)
        if size < 0:
            data = bytes(self._buffer)
            self._buffer.clear()
        else:
            data = bytes(self._buffer[:size])
            del self._buffer[:size]
        return data


def relay_url_to_bucket(
    url: str,
    bucket: str,
    key: str,
    *,
    http_session: requests.Session,
    s3_client,
    options: RelayOptions | None = None,
    cancel_event: threading.Event | None = None,
    on_stage: Callable[[str], None] | None = None,
) -> TransferResult:
    """
    Stream an archive from a URL into an S3 object.

    The link is re-validated first. The call returns only after the
    upload has completed; S3 does not expose the object before then.
    on_stage is called with "downloading" once the link passes
    validation and with "uploading" once the download stream is open.

    Args:
        url: Source download link
        bucket: Destination bucket
        key: Destination object key
        http_session: Session used for the probe and the download
        s3_client: boto3 S3 client scoped to the destination credentials
        options: Timeout and size bounds
        cancel_event: Set from another thread to abort the transfer

    Returns:
        TransferResult for the stored object

    Raises:
        InvalidUrlError: If the link fails validation
        TransferCancelledError: If cancel_event was set mid-transfer
        TransferError: If the download or the upload fails
    """
    options = options or RelayOptions()
    destination = f"s3://{bucket}/{key}"

    check = probe_url(url, session=http_session, timeout=options.timeout)
    if not check.ok:
        raise InvalidUrlError(url=url, reason=check.reason.value)

    if on_stage:
        on_stage("downloading")

    start = time.monotonic()

    log.info("relay_started", url=url, destination=destination)

    try:
        response = http_session.get(url, stream=True, timeout=options.timeout)
    except requests.RequestException as e:
        log.error("relay_download_open_failed", url=url, error=str(e))
        raise TransferError(url, destination, "read", str(e)) from e

    with response:
        if not 200 <= response.status_code < 300:
            log.error(
                "relay_download_bad_status",
                url=url,
                status_code=response.status_code,
            )
            raise TransferError(
                url, destination, "read", f"HTTP {response.status_code}"
            )

        if on_stage:
            on_stage("uploading")

        reader = BoundedChunkReader(
            response.iter_content(chunk_size=options.chunk_size),
            max_bytes=options.max_bytes,
            deadline=start + options.deadline_seconds,
            cancel_event=cancel_event,
        )
        transfer_config = TransferConfig(
            multipart_threshold=options.chunk_size,
            multipart_chunksize=options.chunk_size,
            use_threads=False,
        )

        try:
            s3_client.upload_fileobj(
                reader,
                bucket,
                key,
                ExtraArgs={"ContentType": EXPECTED_CONTENT_TYPE},
                Config=transfer_config,
            )
        except _SourceReadError as e:
            log.error(
                "relay_read_failed",
                url=url,
                destination=destination,
                bytes_read=reader.bytes_read,
                error=str(e),
            )
            if e.cancelled:
                raise TransferCancelledError(url, destination) from e
            raise TransferError(url, destination, "read", str(e)) from e
        except (ClientError, BotoCoreError, S3UploadFailedError) as e:
            log.error(
                "relay_write_failed",
                url=url,
                destination=destination,
                bytes_read=reader.bytes_read,
                error=str(e),
            )
            raise TransferError(url, destination, "write", str(e)) from e

    duration_ms = int((time.monotonic() - start) * 1000)

    log.info(
        "relay_completed",
        destination=destination,
        bytes_transferred=reader.bytes_read,
        duration_ms=duration_ms,
    )

    return TransferResult(
        bucket=bucket,
        key=key,
        bytes_transferred=reader.bytes_read,
        duration_ms=duration_ms,
    )
