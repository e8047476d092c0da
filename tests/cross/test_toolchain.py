"""
Tests for cross-compilation tool overrides.
"""

from prebuildkit.cross.targets import TargetTriple
from prebuildkit.cross.toolchain import cargo_target_key, resolve_toolchain_env

ANDROID = "aarch64-linux-android"


class TestCargoTargetKey:
    def test_key(self):
        assert cargo_target_key(ANDROID) == "AARCH64_LINUX_ANDROID"

    def test_dots(self):
        assert cargo_target_key("thumbv7em-none-eabihf.x") == "THUMBV7EM_NONE_EABIHF_X"


class TestResolveToolchainEnv:
    def test_cargo_form_wins(self):
        environ = {
            "CARGO_TARGET_AARCH64_LINUX_ANDROID_CC": "clang-a",
            "CC_aarch64-linux-android": "clang-b",
        }

        assert resolve_toolchain_env(ANDROID, environ) == [("CC", "clang-a")]

    def test_generic_form(self):
        environ = {"CC_aarch64-linux-android": "clang-b", "AR_aarch64-linux-android": "llvm-ar"}

        assert resolve_toolchain_env(ANDROID, environ) == [("CC", "clang-b"), ("AR", "llvm-ar")]

    def test_linker(self):
        environ = {
            "CARGO_TARGET_AARCH64_LINUX_ANDROID_LINKER": "ld.lld",
            "LD_aarch64-linux-android": "ld.bfd",
        }

        assert resolve_toolchain_env(TargetTriple.parse(ANDROID), environ) == [
            ("LINKER", "ld.lld")
        ]

    def test_nothing_set(self):
        assert resolve_toolchain_env(ANDROID, {"CC": "gcc"}) == []

    def test_other_target_ignored(self):
        environ = {"CC_x86_64-unknown-linux-gnu": "gcc-12"}

        assert resolve_toolchain_env(ANDROID, environ) == []

    def test_empty_value_falls_through(self):
        environ = {
            "CARGO_TARGET_AARCH64_LINUX_ANDROID_CC": "",
            "CC_aarch64-linux-android": "clang-b",
        }

        assert resolve_toolchain_env(ANDROID, environ) == [("CC", "clang-b")]
