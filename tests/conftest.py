"""
Pytest configuration and shared fixtures for prebuildkit tests.
"""

import io
import tarfile
from pathlib import Path
from typing import Callable, Dict

import pytest

from prebuildkit.core.environment import BuildEnvironment


@pytest.fixture
def make_tarball() -> Callable[..., bytes]:
    """
    Factory building an in-memory tar archive.

    ``make_tarball({"src/a.c": "int a;"}, top="demo-1.0", mode="w:gz")``
    returns the archive bytes with every file under ``top/``.
    """

    def _make(files: Dict[str, str], top: str = "pkg-1.0", mode: str = "w:gz") -> bytes:
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode=mode) as tar:
            for name, content in files.items():
                data = content.encode("utf-8")
                info = tarfile.TarInfo(f"{top}/{name}")
                info.size = len(data)
                info.mode = 0o755 if name.endswith(".sh") else 0o644
                tar.addfile(info, io.BytesIO(data))
        return buffer.getvalue()

    return _make


@pytest.fixture
def base_environ(tmp_path: Path) -> Dict[str, str]:
    """Minimal ambient environment of a release build for Linux."""
    return {
        "OUT_DIR": str(tmp_path / "out"),
        "TARGET": "x86_64-unknown-linux-gnu",
        "HOST": "x86_64-unknown-linux-gnu",
        "PROFILE": "release",
        "NUM_JOBS": "4",
        "PATH": "/usr/bin:/bin",
    }


@pytest.fixture
def build_env(base_environ) -> BuildEnvironment:
    return BuildEnvironment.from_environ(base_environ)
