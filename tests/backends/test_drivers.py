"""
Tests for driver integrations: waf, make, cmake and autotools.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from prebuildkit.backends.autotools import AutotoolsIntegration
from prebuildkit.backends.base import BuildContext, lib_file
from prebuildkit.backends.cmake import (
    CMakeIntegration,
    cross_compile_variables,
    detect_generator,
)
from prebuildkit.backends.make import MakeDriver
from prebuildkit.backends.waf import WafDriver
from prebuildkit.core.exceptions import InterpreterNotFoundError
from prebuildkit.core.python_env import PythonInterpreter
from prebuildkit.cross.targets import TargetTriple

LINUX = TargetTriple.parse("x86_64-unknown-linux-gnu")
PYTHON = PythonInterpreter(Path("/usr/bin/python3"), "Python 3.11.7")


def context(target="x86_64-unknown-linux-gnu", profile="release", shared=False, jobs=4):
    return BuildContext(
        target=TargetTriple.parse(target),
        host=LINUX,
        profile=profile,
        num_jobs=jobs,
        shared=shared,
    )


class TestLibFile:
    @pytest.mark.parametrize(
        "target,shared,expected",
        [
            ("x86_64-unknown-linux-gnu", False, "libaubio.a"),
            ("x86_64-unknown-linux-gnu", True, "libaubio.so"),
            ("aarch64-apple-darwin", False, "libaubio.a"),
            ("aarch64-apple-darwin", True, "libaubio.dylib"),
            ("x86_64-pc-windows-msvc", False, "aubio.lib"),
            ("x86_64-pc-windows-msvc", True, "aubio.dll"),
            ("x86_64-pc-windows-gnu", False, "libaubio.a"),
            ("x86_64-pc-windows-gnu", True, "aubio.dll"),
            ("i686-pc-windows-gnullvm", False, "libaubio.a"),
        ],
    )
    def test_names(self, target, shared, expected):
        assert lib_file("aubio", shared, TargetTriple.parse(target)) == expected


class TestWafDriver:
    def test_three_steps(self, tmp_path):
        driver = WafDriver(tmp_path / "waf" / "waf-light")
        src = tmp_path / "src"

        steps = driver.steps(src, tmp_path / "build", ["--disable-docs"], context(), PYTHON)

        assert [s.name for s in steps] == ["configure", "build", "install"]
        assert all(s.cwd == src for s in steps)
        launcher = ["/usr/bin/python3", str(tmp_path / "waf" / "waf-light")]
        assert all(s.command[:2] == launcher for s in steps)

    def test_configure_arguments(self, tmp_path):
        steps = WafDriver(tmp_path / "waf-light").steps(
            tmp_path, tmp_path / "b", ["--disable-docs"], context("x86_64-pc-windows-msvc"), PYTHON
        )

        configure = steps[0].command
        assert configure[2] == "configure"
        assert "--disable-docs" in configure
        assert "--with-target-platform=win64" in configure
        assert configure[-1] == "--build-type=release"

    def test_debug_and_jobs(self, tmp_path):
        steps = WafDriver(tmp_path / "waf-light").steps(
            tmp_path, tmp_path / "b", [], context(profile="debug", jobs=8), PYTHON
        )

        assert "--build-type=debug" in steps[0].command
        assert steps[1].command[-1] == "-j8"

    def test_requires_interpreter(self, tmp_path):
        driver = WafDriver(tmp_path / "waf-light")

        assert driver.requires_python
        with pytest.raises(InterpreterNotFoundError):
            driver.steps(tmp_path, tmp_path / "b", [], context(), None)

    def test_artifact_path(self, tmp_path):
        driver = WafDriver(tmp_path / "waf-light")

        assert driver.artifact_path(tmp_path / "b", "aubio", context()) == tmp_path / "b" / "lib" / "libaubio.a"


class TestMakeDriver:
    def test_single_step_with_wafopts(self, tmp_path):
        steps = MakeDriver().steps(tmp_path, tmp_path / "b", ["--enable-jack"], context(profile="debug"))

        assert len(steps) == 1
        assert steps[0].command == ["make", "-j4"]
        assert steps[0].env == [("WAFOPTS", "--debug --enable-jack")]

    def test_artifact_in_src(self, tmp_path):
        driver = MakeDriver()

        assert driver.artifact_path(tmp_path, "aubio", context()) == tmp_path / "src" / "libaubio.a"
        assert not driver.requires_python


class TestCMakeIntegration:
    def test_native_steps(self, tmp_path):
        src, out = tmp_path / "src", tmp_path / "out"

        steps = CMakeIntegration(generator="Ninja").steps(src, out, ["-DENABLE_FLOAT=ON"], context())

        configure, install = steps
        assert configure.command[:5] == ["cmake", "-S", str(src), "-B", str(out / "_cmake")]
        assert ["-G", "Ninja"] == configure.command[5:7]
        assert f"-DCMAKE_INSTALL_PREFIX={out}" in configure.command
        assert "-DCMAKE_INSTALL_LIBDIR=lib" in configure.command
        assert "-DBUILD_SHARED_LIBS=OFF" in configure.command
        assert "-DCMAKE_BUILD_TYPE=Release" in configure.command
        assert configure.command[-1] == "-DENABLE_FLOAT=ON"
        assert not any(arg.startswith("-DCMAKE_SYSTEM_NAME") for arg in configure.command)
        assert install.command[-5:] == ["install", "--config", "Release", "--parallel", "4"]

    def test_cross_variables(self, tmp_path):
        steps = CMakeIntegration().steps(tmp_path, tmp_path / "o", [], context("aarch64-linux-android"))

        assert "-DCMAKE_SYSTEM_NAME=Android" in steps[0].command
        assert "-DCMAKE_SYSTEM_PROCESSOR=aarch64" in steps[0].command
        assert "-G" not in steps[0].command

    def test_shared_debug(self, tmp_path):
        steps = CMakeIntegration().steps(tmp_path, tmp_path / "o", [], context(profile="debug", shared=True))

        assert "-DBUILD_SHARED_LIBS=ON" in steps[0].command
        assert "-DCMAKE_BUILD_TYPE=Debug" in steps[0].command

    def test_cross_compile_variables_unknown_os(self):
        assert cross_compile_variables(TargetTriple.parse("riscv64gc-unknown-hermit")) == {
            "CMAKE_SYSTEM_NAME": "Hermit",
            "CMAKE_SYSTEM_PROCESSOR": "riscv64gc",
        }


class TestDetectGenerator:
    @patch("prebuildkit.backends.cmake.shutil.which")
    def test_prefers_ninja(self, mock_which):
        mock_which.return_value = "/usr/bin/tool"

        assert detect_generator({"PATH": "/usr/bin"}) == "Ninja"
        mock_which.assert_called_with("ninja", path="/usr/bin")

    @patch("prebuildkit.backends.cmake.os.name", "posix")
    @patch("prebuildkit.backends.cmake.shutil.which")
    def test_falls_back_to_make(self, mock_which):
        mock_which.side_effect = lambda tool, path=None: "/usr/bin/make" if tool == "make" else None

        assert detect_generator({"PATH": "/usr/bin"}) == "Unix Makefiles"

    @patch("prebuildkit.backends.cmake.shutil.which", return_value=None)
    def test_none(self, mock_which):
        assert detect_generator({}) is None


class TestAutotoolsIntegration:
    def test_steps(self, tmp_path):
        steps = AutotoolsIntegration().steps(
            tmp_path, tmp_path / "o", ["--enable-single", "--enable-static"], context()
        )

        configure, install = steps
        assert configure.command[0] == str(tmp_path / "configure")
        assert f"--prefix={tmp_path / 'o'}" in configure.command
        assert "--with-pic" in configure.command
        assert configure.command[-2:] == ["--enable-single", "--enable-static"]
        assert not any(arg.startswith("--host") for arg in configure.command)
        assert install.command == ["make", "-j4", "install"]
        assert ("CFLAGS", "-O3") in configure.env

    def test_cross_and_debug(self, tmp_path):
        steps = AutotoolsIntegration().steps(
            tmp_path, tmp_path / "o", [], context("aarch64-linux-android", profile="debug")
        )

        assert "--host=aarch64-linux-android" in steps[0].command
        assert ("CFLAGS", "-O0 -g3") in steps[1].env
