from __future__ import annotations

import logging

from .command import command_exists, run_cmd

logger = logging.getLogger(__name__)


def font_installed(family: str) -> bool:
    """Case-insensitive search of fontconfig's list for `family`."""
    if not command_exists("fc-list"):
        return False
    r = run_cmd(["fc-list"], check=False)
    return r.returncode == 0 and family.lower() in r.stdout.lower()


def refresh_font_cache(*, dry_run: bool = False) -> None:
    run_cmd(["fc-cache", "-f"], dry_run=dry_run)
