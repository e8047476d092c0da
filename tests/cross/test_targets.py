"""
Tests for target triple parsing and platform mapping.
"""

import pytest

from prebuildkit.cross.targets import TargetTriple, map_platform


class TestTargetTripleParse:
    def test_four_components(self):
        triple = TargetTriple.parse("x86_64-unknown-linux-gnu")

        assert triple.arch == "x86_64"
        assert triple.vendor == "unknown"
        assert triple.os == "linux"
        assert triple.env == "gnu"
        assert str(triple) == "x86_64-unknown-linux-gnu"

    def test_vendor_omitted(self):
        triple = TargetTriple.parse("aarch64-linux-android")

        assert triple.vendor == "unknown"
        assert triple.os == "android"
        assert triple.env == "android"

    def test_two_components(self):
        triple = TargetTriple.parse("wasm32-wasi")

        assert triple.os == "wasi"
        assert triple.env == ""

    def test_apple(self):
        triple = TargetTriple.parse("aarch64-apple-ios-sim")

        assert triple.vendor == "apple"
        assert triple.os == "ios"
        assert triple.env == "sim"
        assert triple.is_apple
        assert triple.is_arm

    @pytest.mark.parametrize("value", ["", "x86_64", "x86_64--linux"])
    def test_invalid(self, value):
        with pytest.raises(ValueError, match="Invalid target triple"):
            TargetTriple.parse(value)


class TestMapPlatform:
    """Every triple maps to a platform token."""

    @pytest.mark.parametrize(
        "triple,expected",
        [
            ("x86_64-pc-windows-msvc", "win64"),
            ("x86_64-pc-windows-gnu", "win64"),
            ("aarch64-pc-windows-msvc", "win64"),
            ("i686-pc-windows-msvc", "win32"),
            ("x86_64-apple-darwin", "darwin"),
            ("aarch64-apple-darwin", "darwin"),
            ("aarch64-apple-ios", "ios"),
            ("armv7-apple-ios", "ios"),
            ("x86_64-apple-ios", "iosimulator"),
            ("aarch64-apple-ios-sim", "iosimulator"),
            ("x86_64-unknown-linux-gnu", "linux"),
            ("aarch64-linux-android", "android"),
            ("armv7-linux-androideabi", "android"),
            ("wasm32-unknown-emscripten", "emscripten"),
            ("x86_64-unknown-freebsd", "freebsd"),
        ],
    )
    def test_mapping(self, triple, expected):
        assert map_platform(TargetTriple.parse(triple)) == expected

    def test_unknown_os_passes_through(self):
        assert map_platform(TargetTriple.parse("riscv64gc-unknown-hermit")) == "hermit"
