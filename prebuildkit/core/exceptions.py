"""
Centralized exception hierarchy for prebuildkit.

Every component raises one of these; only the top-level driver in
``prebuildkit.cli`` turns them into a process exit status.
"""

from typing import Optional, Sequence


# ============================================================================
# Base Exceptions
# ============================================================================


class PrebuildKitError(Exception):
    """Base exception for all prebuildkit errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class MissingEnvironmentError(PrebuildKitError):
    """Raised when a required ambient build variable is not set."""

    def __init__(self, variable: str):
        self.variable = variable
        super().__init__(f"Required environment variable is not set: {variable}")


class InvalidEnvironmentError(PrebuildKitError):
    """Raised when an ambient build variable holds an unusable value."""

    def __init__(self, variable: str, value: str, reason: str = ""):
        self.variable = variable
        self.value = value
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid value for {variable}: {value!r}{detail}")


class ManifestError(PrebuildKitError):
    """Dependency manifest parsing or validation error."""

    pass


# ============================================================================
# Source Exceptions
# ============================================================================


class FetchError(PrebuildKitError):
    """Raised when a source archive cannot be downloaded or unpacked."""

    pass


class PatchError(PrebuildKitError):
    """Raised when a file expected by the source patcher is missing or unreadable."""

    pass


# ============================================================================
# Build Exceptions
# ============================================================================


class BuildError(PrebuildKitError):
    """Base exception for build execution errors."""

    pass


class InterpreterNotFoundError(BuildError):
    """Raised when no Python 3 interpreter is available to launch the driver."""

    def __init__(self, candidates: Sequence[str]):
        self.candidates = list(candidates)
        super().__init__(
            "No Python 3 interpreter found. "
            f"Searched: {', '.join(self.candidates)}"
        )


class BuildStepError(BuildError):
    """Raised when a build step exits with a non-zero status."""

    def __init__(
        self,
        step: str,
        command: Sequence[str],
        returncode: Optional[int],
        stdout: str = "",
        stderr: str = "",
    ):
        self.step = step
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        if returncode is None:
            reason = "could not be started"
        else:
            reason = f"failed with exit code {returncode}"
        super().__init__(f"Build step '{step}' {reason}: {' '.join(self.command)}")

    def diagnostic(self) -> str:
        """Captured output of the failing step, stderr last."""
        parts = []
        if self.stdout.strip():
            parts.append(self.stdout.rstrip())
        if self.stderr.strip():
            parts.append(self.stderr.rstrip())
        return "\n".join(parts) or "<no output captured>"
