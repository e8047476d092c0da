"""
Streaming archive downloads.

Source archives are fetched with ``requests`` in fixed-size chunks. Progress
is reported through an optional callback at most twice a second. Any
transport or HTTP failure raises ``DownloadError`` after the partial file is
removed; retrying is left to whoever runs the build again.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
REPORT_INTERVAL = 0.5

MIB = 1024 * 1024


class DownloadError(Exception):
    """An archive could not be retrieved."""

    pass


@dataclass
class DownloadProgress:
    """Snapshot of a running download."""

    bytes_downloaded: int
    total_bytes: int  # 0 when the server sent no content-length
    percentage: float
    speed_bps: float
    eta_seconds: float

    def __str__(self) -> str:
        return format_progress(self)


ProgressCallback = Callable[[DownloadProgress], None]


class _ProgressTracker:
    """Accumulates byte counts and throttles callback invocations."""

    def __init__(self, total: int, callback: Optional[ProgressCallback]):
        self.total = total
        self.callback = callback
        self.received = 0
        self.started = time.monotonic()
        self.reported = self.started

    def advance(self, count: int) -> None:
        self.received += count
        if self.callback is None:
            return

        now = time.monotonic()
        finished = self.total > 0 and self.received >= self.total
        if finished or now - self.reported >= REPORT_INTERVAL:
            self.reported = now
            self.callback(self.snapshot(now))

    def snapshot(self, now: float) -> DownloadProgress:
        elapsed = now - self.started
        speed = self.received / elapsed if elapsed > 0 else 0.0
        if self.total > 0:
            percentage = self.received * 100.0 / self.total
            eta = (self.total - self.received) / speed if speed > 0 else 0.0
        else:
            percentage = 0.0
            eta = 0.0
        return DownloadProgress(
            bytes_downloaded=self.received,
            total_bytes=self.total,
            percentage=percentage,
            speed_bps=speed,
            eta_seconds=eta,
        )


def download_file(
    url: str,
    destination: Path,
    progress_callback: Optional[ProgressCallback] = None,
    timeout: int = 60,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Stream ``url`` into ``destination``.

    Args:
        url: Archive URL
        destination: File to create; parent directories are created
        progress_callback: Receives DownloadProgress updates
        timeout: Connect/read timeout in seconds
        session: requests session to use (default: module-level requests)

    Returns:
        ``destination``

    Raises:
        DownloadError: On connection errors or non-2xx responses
        ValueError: If url or destination is empty
    """
    if not url:
        raise ValueError("URL cannot be empty")
    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    http = session or requests

    logger.info(f"Downloading {url}")
    try:
        with http.get(url, stream=True, timeout=timeout, allow_redirects=True) as response:
            response.raise_for_status()
            tracker = _ProgressTracker(
                int(response.headers.get("content-length") or 0), progress_callback
            )
            with open(destination, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
                        tracker.advance(len(chunk))
    except (RequestException, OSError) as e:
        logger.error(f"Download of {url} failed: {e}")
        destination.unlink(missing_ok=True)
        raise DownloadError(f"Failed to download {url}: {e}") from e

    logger.debug(f"Saved {tracker.received} bytes to {destination}")
    return destination


def format_progress(progress: DownloadProgress) -> str:
    """
    Human-readable progress line.

    Example:
        >>> format_progress(DownloadProgress(52428800, 104857600, 50.0, 1048576, 50))
        '50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s'
    """
    done = progress.bytes_downloaded / MIB
    rate = progress.speed_bps / MIB

    if progress.total_bytes <= 0:
        return f"{done:.1f} MB at {rate:.1f} MB/s"

    return (
        f"{done:.1f}/{progress.total_bytes / MIB:.1f} MB "
        f"({progress.percentage:.1f}%) at {rate:.1f} MB/s "
        f"ETA: {progress.eta_seconds:.0f}s"
    )
