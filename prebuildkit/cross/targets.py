"""
Target triples and upstream platform tokens.

A target triple such as ``x86_64-pc-windows-msvc`` or
``aarch64-linux-android`` is decomposed into architecture, vendor, operating
system and environment. ``map_platform`` translates it into the platform
vocabulary of the waf build driver (``--with-target-platform``).
"""

from dataclasses import dataclass

KNOWN_OS = {
    "aix",
    "android",
    "darwin",
    "dragonfly",
    "emscripten",
    "freebsd",
    "fuchsia",
    "haiku",
    "illumos",
    "ios",
    "linux",
    "macos",
    "netbsd",
    "none",
    "openbsd",
    "solaris",
    "tvos",
    "wasi",
    "watchos",
    "windows",
}

APPLE_OS = {"darwin", "macos", "ios", "tvos", "watchos"}

ARM_ARCH_PREFIXES = ("aarch64", "arm", "thumb")


@dataclass(frozen=True)
class TargetTriple:
    """
    Decomposed target triple.

    Attributes:
        arch: CPU architecture (e.g. 'x86_64', 'aarch64', 'armv7', 'i686')
        vendor: Vendor component ('unknown' when the triple omits it)
        os: Operating system ('linux', 'windows', 'darwin', 'ios', 'android', ...)
        env: Environment/ABI ('gnu', 'msvc', 'android', 'sim', or '')
        raw: The triple string as given
    """

    arch: str
    vendor: str
    os: str
    env: str
    raw: str

    @classmethod
    def parse(cls, triple: str) -> "TargetTriple":
        """
        Parse a target triple string.

        Raises:
            ValueError: If the string has fewer than two components

        Example:
            >>> TargetTriple.parse("aarch64-linux-android").os
            'android'
            >>> TargetTriple.parse("x86_64-apple-darwin").vendor
            'apple'
        """
        parts = triple.strip().split("-")
        if len(parts) < 2 or not all(parts):
            raise ValueError(f"Invalid target triple: {triple!r}")

        arch = parts[0]
        if len(parts) == 2:
            vendor, os_name, env = "unknown", parts[1], ""
        elif parts[1] in KNOWN_OS:
            # arch-os-env, vendor omitted
            vendor, os_name, env = "unknown", parts[1], "-".join(parts[2:])
        else:
            vendor, os_name, env = parts[1], parts[2], "-".join(parts[3:])

        if os_name == "linux" and env.startswith("android"):
            os_name = "android"

        return cls(arch=arch, vendor=vendor, os=os_name, env=env, raw=triple)

    def __str__(self) -> str:
        return self.raw

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    @property
    def is_apple(self) -> bool:
        return self.vendor == "apple" or self.os in APPLE_OS

    @property
    def is_arm(self) -> bool:
        return self.arch.startswith(ARM_ARCH_PREFIXES)

    @property
    def is_64bit(self) -> bool:
        return self.arch.endswith("64")


def map_platform(triple: TargetTriple) -> str:
    """
    Map a target triple to the waf platform token.

    - windows: 'win64' for 64-bit architectures, else 'win32'
    - darwin/macos: 'darwin'
    - ios: 'ios' on ARM devices, 'iosimulator' otherwise (and for '-sim')
    - anything else: the OS name unchanged

    Example:
        >>> map_platform(TargetTriple.parse("x86_64-pc-windows-msvc"))
        'win64'
        >>> map_platform(TargetTriple.parse("aarch64-apple-ios"))
        'ios'
    """
    if triple.os == "windows":
        return "win64" if triple.is_64bit else "win32"

    if triple.os in ("darwin", "macos"):
        return "darwin"

    if triple.os == "ios":
        if triple.is_arm and triple.env != "sim":
            return "ios"
        return "iosimulator"

    return triple.os
