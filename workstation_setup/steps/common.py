from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..context import SetupCtx
from ..errors import InstallFailure
from ..lib.command import command_exists, command_path, privilege_commands
from ..lib.git import git_clone
from ..lib.pkg import apt_install, apt_update
from ..lib.preflight import check_platform, require_commands
from ..logging_utils import open_log_file
from ..state_store import set_decision

logger = logging.getLogger(__name__)


class PreflightStep:
    step_id = "10_preflight"
    title = "Running preflight checks..."
    always_run = True

    def __init__(
        self,
        commands: Sequence[str],
        *,
        system: str = "Linux",
        machine: Optional[str] = None,
        privileged: bool = True,
    ) -> None:
        self.commands = list(commands)
        self.system = system
        self.machine = machine
        self.privileged = privileged

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        check_platform(system=self.system, machine=self.machine)
        required = [*self.commands]
        if self.privileged:
            required = [*privilege_commands(), *required]
        require_commands(required)
        open_log_file()
        logger.info("All preflight checks passed.")
        return state


class AptInstallStep:
    """Install a Debian package unless its command is already on PATH."""

    def __init__(self, step_id: str, *, package: str, command: Optional[str] = None, label: Optional[str] = None) -> None:
        self.step_id = step_id
        self.package = package
        self.command = command or package
        self.label = label or package
        self.title = f"Installing {self.label}..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        if command_exists(self.command):
            logger.warning("%s is already installed at %s. Skipping.", self.label, command_path(self.command))
            return state

        apt_update(dry_run=ctx.dry_run)
        apt_install([self.package], dry_run=ctx.dry_run)
        logger.info("%s installed.", self.label)
        return state


class OptionalAptInstallStep:
    """Like AptInstallStep, but a failed install only flips a decision flag.

    The flag `<decision>` is recorded in the state document so later steps
    (and resumed runs) can branch on it.
    """

    def __init__(self, step_id: str, *, package: str, decision: str, command: Optional[str] = None) -> None:
        self.step_id = step_id
        self.package = package
        self.command = command or package
        self.decision = decision
        self.title = f"Attempting to install {package}..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        if command_exists(self.command):
            logger.warning("%s is already installed. Skipping.", self.package)
            set_decision(state, self.decision, True)
            return state

        try:
            apt_update(dry_run=ctx.dry_run)
            apt_install([self.package], dry_run=ctx.dry_run)
        except InstallFailure as e:
            logger.warning("%s install failed, continuing without it: %s", self.package, e)
            set_decision(state, self.decision, False)
            return state

        logger.info("%s installed.", self.package)
        set_decision(state, self.decision, True)
        return state


class GitCloneStep:
    def __init__(self, step_id: str, *, label: str, url: Callable[[SetupCtx], str], dest: Callable[[SetupCtx], Path]) -> None:
        self.step_id = step_id
        self.label = label
        self.url = url
        self.dest = dest
        self.title = f"Installing {label}..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        dest = self.dest(ctx)
        if dest.exists():
            logger.warning("%s already installed at %s. Skipping.", self.label, dest)
            return state

        git_clone(self.url(ctx), dest, dry_run=ctx.dry_run)
        logger.info("%s cloned into %s", self.label, dest)
        return state


class ReportStep:
    """Print the manual follow-ups once the flow is done."""

    step_id = "90_report"
    title = "Done"
    always_run = True

    def __init__(self, headline: str, lines: Callable[[SetupCtx, Dict[str, Any]], List[str]]) -> None:
        self.headline = headline
        self.lines = lines

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        rule = "=" * 64
        ctx.write("")
        ctx.write(rule)
        ctx.write(f" {self.headline}")
        ctx.write(rule)
        ctx.write("")
        for line in self.lines(ctx, state):
            ctx.write(line)
        ctx.write("")
        return state
