from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def backup_path(target: Path) -> Path:
    return target.with_name(target.name + ".bak")


def backup_dir(target: Path, *, dry_run: bool = False) -> Optional[Path]:
    """Move `target` aside to `target.bak`.

    Returns the backup path when a rename happened. When a backup already
    exists the target is left where it is, since a second rename would
    clobber the first backup.
    """

    if not target.is_dir():
        return None

    bak = backup_path(target)
    if bak.exists():
        logger.warning("%s and %s both exist. Leaving %s as-is.", target, bak, target)
        return None

    if dry_run:
        logger.info("Would back up %s to %s", target, bak)
        return bak

    logger.warning("Backing up existing %s to %s", target, bak)
    target.rename(bak)
    return bak


def ensure_dir(path: Path, *, dry_run: bool = False) -> bool:
    if path.is_dir():
        return False
    if dry_run:
        logger.info("Would create %s", path)
        return True
    path.mkdir(parents=True, exist_ok=True)
    return True


def write_file(
    path: Path,
    contents: str,
    *,
    mode: Optional[int] = None,
    confirm: Optional[Callable[[Path], bool]] = None,
    dry_run: bool = False,
) -> bool:
    """Write `contents` to `path`, returning True when the file changed.

    Identical contents are left alone. If `confirm` is given it is asked
    before replacing a file whose contents differ; a False answer keeps the
    existing file.
    """

    if path.is_file():
        current = path.read_text(encoding="utf-8")
        if current == contents:
            if mode is not None and not dry_run and (path.stat().st_mode & 0o777) != mode:
                path.chmod(mode)
            logger.info("%s is already up to date. Skipping.", path)
            return False
        if confirm is not None and not confirm(path):
            logger.info("Keeping existing %s", path)
            return False

    if dry_run:
        logger.info("Would write %s", path)
        return True

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    if mode is not None:
        path.chmod(mode)
    logger.info("Wrote %s", path)
    return True
