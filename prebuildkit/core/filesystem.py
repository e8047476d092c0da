"""
Source tree file handling.

- Unpacking of tar and zip archives with leading components stripped
- In-place rewrites that never leave a half-written file behind
- Staging directories that only appear at their final path when complete
"""

import logging
import os
import shutil
import sys
import tarfile
import tempfile
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

TAR_MODES = (
    (".tar.gz", "r:gz"),
    (".tgz", "r:gz"),
    (".tar.bz2", "r:bz2"),
    (".tbz2", "r:bz2"),
    (".tar.xz", "r:xz"),
)


class FilesystemError(Exception):
    """A file system operation on a source or build tree failed."""

    pass


class ArchiveExtractionError(FilesystemError):
    """An archive is missing, corrupt or cannot be written out."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Neither the archive name nor its content is a format we can open."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """A member would land outside the extraction directory."""

    pass


def is_relative_to(path: Path, parent: Path) -> bool:
    """``Path.is_relative_to`` for interpreters that lack it."""
    try:
        path.relative_to(parent)
    except ValueError:
        return False
    return True


def strip_path_components(name: str, count: int) -> Optional[str]:
    """
    Drop the first ``count`` components of an archive member name.

    Returns:
        Remaining relative path, or None if nothing is left

    Example:
        >>> strip_path_components("aubio-0.4.9/src/aubio.h", 1)
        'src/aubio.h'
        >>> strip_path_components("aubio-0.4.9/", 1) is None
        True
    """
    parts = [p for p in name.replace("\\", "/").split("/") if p not in ("", ".")]
    if len(parts) <= count:
        return None
    return "/".join(parts[count:])


def _check_member(name: str, root: Path) -> None:
    if not is_relative_to((root / name).resolve(), root):
        raise InsecureArchiveError(f"Refusing to extract '{name}': outside {root}")


def extract_archive(
    archive_path: PathLike, destination: PathLike, strip_components: int = 0
) -> int:
    """
    Unpack an archive, dropping ``strip_components`` leading path components
    from every member (like ``tar --strip-components``).

    Recognised suffixes: .tar.gz/.tgz, .tar.bz2/.tbz2, .tar.xz and .zip.
    Any other name is opened by content when it is a tar or zip archive.

    Args:
        archive_path: Archive file
        destination: Directory to unpack into (created if needed)
        strip_components: Leading components to drop

    Returns:
        Number of members written

    Raises:
        UnsupportedArchiveFormat: Neither a known suffix nor tar/zip content
        InsecureArchiveError: A member escapes ``destination``
        ArchiveExtractionError: Missing or corrupt archive
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.is_file():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    unpack, mode = _archive_kind(archive_path)

    destination.mkdir(parents=True, exist_ok=True)
    root = destination.resolve()

    try:
        return unpack(archive_path, root, strip_components, mode)
    except InsecureArchiveError:
        raise
    except (tarfile.TarError, zipfile.BadZipFile, EOFError, OSError) as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e


def _archive_kind(archive_path: Path):
    lowered = archive_path.name.lower()
    if lowered.endswith(".zip"):
        return _unpack_zip, None
    for suffix, mode in TAR_MODES:
        if lowered.endswith(suffix):
            return _unpack_tar, mode

    # no usable suffix (e.g. a query-string download URL): go by content
    if zipfile.is_zipfile(archive_path):
        return _unpack_zip, None
    if tarfile.is_tarfile(archive_path):
        return _unpack_tar, "r:*"
    raise UnsupportedArchiveFormat(
        f"Cannot unpack {archive_path.name}: "
        "expected .tar.gz, .tar.bz2, .tar.xz or .zip"
    )


def _unpack_zip(archive_path: Path, root: Path, strip: int, mode) -> int:
    with zipfile.ZipFile(archive_path) as zf:
        selected: List[zipfile.ZipInfo] = []
        for info in zf.infolist():
            name = strip_path_components(info.filename, strip)
            if name is None:
                continue
            _check_member(name, root)
            info.filename = name + "/" if info.is_dir() else name
            selected.append(info)

        for info in selected:
            zf.extract(info, root)
    return len(selected)


def _unpack_tar(archive_path: Path, root: Path, strip: int, mode: str) -> int:
    with tarfile.open(archive_path, mode) as tar:
        selected: List[tarfile.TarInfo] = []
        for member in tar.getmembers():
            name = strip_path_components(member.name, strip)
            if name is None:
                continue
            _check_member(name, root)
            member.name = name

            if member.islnk():
                target = strip_path_components(member.linkname, strip)
                if target is None:
                    continue
                member.linkname = target
            selected.append(member)

        if sys.version_info >= (3, 12):
            tar.extractall(root, members=selected, filter="data")
        else:
            tar.extractall(root, members=selected)
    return len(selected)


def atomic_write(file_path: PathLike, content: str, encoding: str = "utf-8") -> None:
    """
    Replace a text file through a sibling temporary file.

    Permission bits of an existing file (e.g. the executable bit of a
    helper script) carry over to the new content.

    Example:
        >>> atomic_write('scripts/get_waf.sh', '#!/usr/bin/env bash\\n...')
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    previous_mode = file_path.stat().st_mode if file_path.exists() else None

    fd, tmp_name = tempfile.mkstemp(dir=file_path.parent, prefix=f".{file_path.name}.")
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(content)
        if previous_mode is not None:
            os.chmod(tmp, previous_mode)
        os.replace(tmp, file_path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def safe_rmtree(path: PathLike, require_prefix: Optional[PathLike] = None) -> None:
    """
    Delete a directory tree, optionally only if it lies under ``require_prefix``.

    Raises:
        ValueError: ``path`` is outside ``require_prefix``
        FilesystemError: ``path`` is not a directory or cannot be removed
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, prefix):
            raise ValueError(f"Refusing to delete {path}: not under {prefix}")

    if not path.exists():
        return
    if not path.is_dir():
        raise FilesystemError(f"Not a directory: {path}")

    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove {path}: {e}") from e


@contextmanager
def staging_directory(destination: PathLike) -> Iterator[Path]:
    """
    Populate a directory through a sibling staging directory.

    The staging directory is created next to ``destination`` (same
    filesystem) and renamed to ``destination`` when the block exits
    normally. On error it is removed and ``destination`` stays absent.

    Example:
        >>> with staging_directory(out / "source" / "0.4.9") as staging:
        ...     extract_archive(archive, staging, strip_components=1)
    """
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    staging = Path(
        tempfile.mkdtemp(dir=destination.parent, prefix=f".{destination.name}.")
    )
    logger.debug(f"Staging {destination} in {staging}")

    try:
        yield staging
        staging.rename(destination)
    finally:
        if staging.exists():
            safe_rmtree(staging, require_prefix=destination.parent)


__all__ = [
    "FilesystemError",
    "ArchiveExtractionError",
    "UnsupportedArchiveFormat",
    "InsecureArchiveError",
    "is_relative_to",
    "strip_path_components",
    "extract_archive",
    "atomic_write",
    "safe_rmtree",
    "staging_directory",
]
