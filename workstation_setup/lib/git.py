from __future__ import annotations

import logging
import shutil
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


def git_clone(url: str, dest: Path, *, detach: bool = False, dry_run: bool = False) -> None:
    """Clone `url` into `dest`.

    detach removes the `.git` directory afterwards, leaving a plain copy the
    user owns (used for starter templates).
    """
    run_cmd(["git", "clone", url, str(dest)], dry_run=dry_run)

    if detach and not dry_run:
        git_dir = dest / ".git"
        if git_dir.exists():
            shutil.rmtree(git_dir)
            logger.debug("Removed %s", git_dir)
