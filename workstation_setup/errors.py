from __future__ import annotations

from typing import Sequence


class SetupError(Exception):
    """Base class for failures that abort a provisioning flow."""


class PreflightFailure(SetupError):
    """A required command is missing or the platform is unsupported."""


class InstallFailure(SetupError):
    """A package install, download or clone did not succeed."""


class CommandError(InstallFailure):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if stderr.strip():
            msg += f"\n{stderr.strip()}"
        super().__init__(msg)


class ConfigError(SetupError, ValueError):
    pass


class UserAborted(SetupError):
    """Input stream closed while waiting for an answer."""
