"""
Idempotent source fetching.

An existing destination directory is trusted as a complete earlier fetch and
returned without touching the network. Otherwise the archive is downloaded,
unpacked with its single top-level directory stripped into a staging
directory, and the staging directory is renamed to the destination. A failed
fetch therefore never leaves a destination that looks already fetched.
"""

import logging
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

import requests

from prebuildkit.core.download import DownloadError, DownloadProgress, download_file
from prebuildkit.core.exceptions import FetchError
from prebuildkit.core.filesystem import FilesystemError, extract_archive, staging_directory
from prebuildkit.source.resolver import SourceDescriptor

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Result of a fetch operation."""

    url: str
    """Archive URL the sources came from"""

    path: Path
    """Directory holding the unpacked sources"""

    was_cached: bool
    """Whether the directory already existed (no download performed)"""

    fetch_time: float = 0.0
    """Time spent downloading and unpacking in seconds"""


def archive_name(url: str) -> str:
    """
    Derive the local archive file name from a URL.

    Example:
        >>> archive_name("https://github.com/aubio/aubio/archive/0.4.9.tar.gz?x=1")
        '0.4.9.tar.gz'
    """
    name = urlsplit(url).path.rstrip("/").split("/")[-1]
    return name or "source.tar.gz"


class Fetcher:
    """
    Downloads and unpacks source archives exactly once per destination.

    Example:
        >>> fetcher = Fetcher()
        >>> result = fetcher.fetch(source, out_dir / "source" / source.version)
        >>> print(result.path, result.was_cached)
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: int = 60,
        strip_components: int = 1,
    ):
        """
        Initialize fetcher.

        Args:
            session: Optional requests session used for downloads
            timeout: Network timeout in seconds
            strip_components: Leading path components dropped when unpacking
        """
        self.session = session
        self.timeout = timeout
        self.strip_components = strip_components

    def fetch(self, source: SourceDescriptor, destination: Path) -> FetchResult:
        """
        Ensure the sources of ``source`` are unpacked in ``destination``.

        Args:
            source: Source archive description
            destination: Target directory

        Returns:
            FetchResult describing what happened

        Raises:
            FetchError: If download, decompression or unpacking fails
        """
        destination = Path(destination)
        url = source.resolve()

        if destination.is_dir():
            logger.info(f"Sources already present: {destination}")
            return FetchResult(url=url, path=destination, was_cached=True)

        logger.info(f"Fetching {source.package} {source.version} from {url} to {destination}")
        start = time.time()

        try:
            with staging_directory(destination) as staging:
                with tempfile.TemporaryDirectory(
                    dir=destination.parent, prefix=f".{destination.name}.download."
                ) as tmpdir:
                    archive_path = Path(tmpdir) / archive_name(url)

                    download_file(
                        url,
                        archive_path,
                        progress_callback=self._log_progress,
                        timeout=self.timeout,
                        session=self.session,
                    )

                    count = extract_archive(
                        archive_path, staging, strip_components=self.strip_components
                    )
                    if count == 0:
                        raise FetchError(f"Archive from {url} contains no files")
                    logger.debug(f"Unpacked {count} entries")

        except FetchError:
            raise
        except (DownloadError, FilesystemError, OSError) as e:
            raise FetchError(
                f"Failed to fetch {source.package} {source.version} from {url}: {e}"
            ) from e

        elapsed = time.time() - start
        logger.info(f"Fetched {source.package} {source.version} in {elapsed:.2f}s")
        return FetchResult(url=url, path=destination, was_cached=False, fetch_time=elapsed)

    @staticmethod
    def _log_progress(progress: DownloadProgress) -> None:
        logger.debug(f"Downloading: {progress}")
