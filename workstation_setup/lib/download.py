from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


def download_file(url: str, dest: Path, *, dry_run: bool = False) -> None:
    """Fetch `url` into `dest` with curl. No checksum is verified."""
    if not dry_run:
        dest.parent.mkdir(parents=True, exist_ok=True)
    run_cmd(["curl", "-fsSL", "-o", str(dest), url], dry_run=dry_run)


def download_and_extract_tarball(
    url: str,
    dest_dir: Path,
    *,
    strip_components: int = 1,
    sudo: bool = False,
    dry_run: bool = False,
) -> None:
    run_cmd(["mkdir", "-p", str(dest_dir)], sudo=sudo, dry_run=dry_run)
    with tempfile.TemporaryDirectory(prefix="workstation-setup-") as tmp:
        archive = Path(tmp) / "release.tar.gz"
        download_file(url, archive, dry_run=dry_run)
        run_cmd(
            ["tar", "-C", str(dest_dir), "-xzf", str(archive), f"--strip-components={strip_components}"],
            sudo=sudo,
            dry_run=dry_run,
        )
    logger.info("Extracted %s into %s", url, dest_dir)


def download_and_unzip(url: str, dest_dir: Path, *, dry_run: bool = False) -> None:
    if not dry_run:
        dest_dir.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory(prefix="workstation-setup-") as tmp:
        archive = Path(tmp) / "archive.zip"
        download_file(url, archive, dry_run=dry_run)
        run_cmd(["unzip", "-q", "-o", str(archive), "-d", str(dest_dir)], dry_run=dry_run)
    logger.info("Unpacked %s into %s", url, dest_dir)
