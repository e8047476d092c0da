"""
Tests for link directive emission.
"""

import io
from pathlib import Path

from prebuildkit.cross.targets import TargetTriple
from prebuildkit.link.emitter import LinkEmitter


def lines(stream):
    return stream.getvalue().splitlines()


class TestLinkEmitter:
    def test_static_linux(self):
        stream = io.StringIO()

        LinkEmitter(stream).emit(
            "aubio", Path("/out/build/0.4.9/lib"), False, TargetTriple.parse("x86_64-unknown-linux-gnu")
        )

        assert lines(stream) == [
            f"search-path={Path('/out/build/0.4.9/lib')}",
            "link-lib-static=aubio",
        ]

    def test_shared(self):
        stream = io.StringIO()

        LinkEmitter(stream).emit("aubio", Path("/l"), True, TargetTriple.parse("x86_64-unknown-linux-gnu"))

        assert lines(stream)[1] == "link-lib=aubio"

    def test_apple_frameworks(self):
        stream = io.StringIO()

        LinkEmitter(stream).emit("aubio", Path("/l"), False, TargetTriple.parse("aarch64-apple-darwin"))

        assert lines(stream)[2:] == [
            "link-lib-framework=Accelerate",
            "link-lib-framework=CoreFoundation",
        ]

    def test_frameworks_suppressed(self):
        stream = io.StringIO()

        LinkEmitter(stream).emit(
            "fftw3f", Path("/l"), False, TargetTriple.parse("aarch64-apple-ios"), frameworks=False
        )

        assert len(lines(stream)) == 2

    def test_defaults_to_stdout(self, capsys):
        LinkEmitter().directive("search-path", "/x")

        assert capsys.readouterr().out == "search-path=/x\n"
