from __future__ import annotations

import logging
import platform
from typing import Iterable, Optional

from ..errors import PreflightFailure
from .command import command_exists

logger = logging.getLogger(__name__)


def check_platform(*, system: str = "Linux", machine: Optional[str] = "x86_64") -> None:
    actual_system = platform.system()
    if actual_system != system:
        raise PreflightFailure(f"This setup is intended for {system} only, found {actual_system}.")

    if machine is None:
        return

    actual_machine = platform.machine()
    if actual_machine != machine:
        raise PreflightFailure(f"This setup only supports the {machine} architecture, found {actual_machine}.")


def require_commands(names: Iterable[str]) -> None:
    """Fail on the first command that is not on PATH."""
    for name in names:
        if not command_exists(name):
            raise PreflightFailure(f"'{name}' is required but not installed. Please install it and re-run.")
        logger.debug("Found required command %s", name)
