from __future__ import annotations

from dataclasses import dataclass, field

from .config import SetupConfig
from .lib.prompt import ReadLine, Write, console_read_line, console_write


@dataclass(frozen=True)
class SetupCtx:
    cfg: SetupConfig
    flow: str
    dry_run: bool = False
    assume_yes: bool = False
    read_line: ReadLine = field(default=console_read_line)
    write: Write = field(default=console_write)
