"""Managed blocks in the user's shell startup file.

Each entry we own is wrapped in sentinel comments::

    # >>> workstation-setup: nvim-path >>>
    export PATH="$PATH":/opt/nvim/bin
    # <<< workstation-setup: nvim-path <<<

so re-runs can find and rewrite it in place instead of searching for a
literal substring anywhere in the file.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

MARKER = "workstation-setup"


class BlockResult(str, Enum):
    ADDED = "added"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    PRESENT = "present"


def begin_marker(block_id: str) -> str:
    return f"# >>> {MARKER}: {block_id} >>>"


def end_marker(block_id: str) -> str:
    return f"# <<< {MARKER}: {block_id} <<<"


def render_block(block_id: str, body: str) -> List[str]:
    return [begin_marker(block_id), *body.rstrip("\n").splitlines(), end_marker(block_id)]


def find_block(lines: List[str], block_id: str) -> Optional[Tuple[int, int]]:
    """Return (begin, end) line indexes of the block, inclusive."""
    begin: Optional[int] = None
    for i, line in enumerate(lines):
        if begin is None:
            if line.strip() == begin_marker(block_id):
                begin = i
        elif line.strip() == end_marker(block_id):
            return begin, i
    return None


def has_active_line(lines: List[str], key: str) -> bool:
    """True if an uncommented line contains `key`."""
    for line in lines:
        stripped = line.strip()
        if stripped.startswith("#"):
            continue
        if key in stripped:
            return True
    return False


def ensure_block(
    rc_path: Path,
    block_id: str,
    body: str,
    *,
    key: Optional[str] = None,
    dry_run: bool = False,
) -> BlockResult:
    """Make sure `body` is present in `rc_path` as a managed block.

    key is a literal that identifies an equivalent hand-written line (e.g.
    ``alias startday=``). If such a line is active outside our block the
    file is left alone so the entry is never duplicated.
    """

    text = rc_path.read_text(encoding="utf-8") if rc_path.exists() else ""
    lines = text.splitlines()
    new_block = render_block(block_id, body)

    span = find_block(lines, block_id)
    if span is not None:
        begin, end = span
        if lines[begin : end + 1] == new_block:
            logger.warning("'%s' already configured in %s. Skipping.", block_id, rc_path)
            return BlockResult.UNCHANGED
        updated = lines[:begin] + new_block + lines[end + 1 :]
        _write_lines(rc_path, updated, dry_run=dry_run)
        logger.info("Updated '%s' in %s", block_id, rc_path)
        return BlockResult.UPDATED

    if key and has_active_line(lines, key):
        logger.warning("'%s' already exists in %s. Skipping.", key.strip(), rc_path)
        return BlockResult.PRESENT

    if lines and lines[-1].strip():
        lines.append("")
    _write_lines(rc_path, lines + new_block, dry_run=dry_run)
    logger.info("Added '%s' to %s", block_id, rc_path)
    return BlockResult.ADDED


def _write_lines(rc_path: Path, lines: List[str], *, dry_run: bool) -> None:
    if dry_run:
        logger.info("Would update %s", rc_path)
        return
    rc_path.parent.mkdir(parents=True, exist_ok=True)
    rc_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
