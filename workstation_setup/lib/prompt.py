from __future__ import annotations

import logging
import re
from typing import Callable, Optional, Sequence

from ..errors import UserAborted

logger = logging.getLogger(__name__)

ReadLine = Callable[[str], Optional[str]]
Write = Callable[[str], None]

_DIGITS = re.compile(r"^[0-9]+$")


def console_read_line(prompt: str) -> Optional[str]:
    try:
        return input(prompt)
    except EOFError:
        return None


def console_write(text: str) -> None:
    print(text)


def parse_choice(raw: str, count: int) -> Optional[int]:
    """Map a 1-based menu answer to a 0-based index, or None if invalid."""
    raw = raw.strip()
    if not _DIGITS.match(raw):
        return None
    n = int(raw)
    if 1 <= n <= count:
        return n - 1
    return None


def pick_option(options: Sequence[str], read_line: ReadLine, write: Write, *, title: str = "Available options:") -> int:
    """Show a numbered menu and keep asking until a valid entry is given."""
    if not options:
        raise ValueError("pick_option needs at least one option")

    write("")
    write(title)
    for i, name in enumerate(options, start=1):
        write(f"  {i}) {name}")

    prompt = f"Pick one [1-{len(options)}]: "
    while True:
        raw = read_line(prompt)
        if raw is None:
            raise UserAborted("No selection made (input closed)")
        idx = parse_choice(raw, len(options))
        if idx is not None:
            return idx
        logger.warning("Invalid choice. Please enter a number between 1 and %d.", len(options))


def confirm(question: str, read_line: ReadLine) -> bool:
    """Ask a [y/N] question; anything but y/Y is a no."""
    raw = read_line(f"{question} [y/N]: ")
    if raw is None:
        return False
    return raw.strip() in {"y", "Y"}
