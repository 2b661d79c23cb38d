from __future__ import annotations

import logging
import shlex
from typing import Any, Dict, List

from ..context import SetupCtx
from ..errors import InstallFailure
from ..lib.command import command_exists, run_cmd
from ..lib.fsops import ensure_dir, write_file
from ..lib.shellrc import ensure_block
from ..state_store import get_decision, set_decision
from ..templates import render_start_day_script, render_tmux_conf, render_tmuxinator_project
from .common import AptInstallStep, GitCloneStep, OptionalAptInstallStep, PreflightStep, ReportStep

logger = logging.getLogger(__name__)

ALIAS_NAME = "startday"
TMUXINATOR_DECISION = "tmuxinator_available"


def plugin_dir_name(plugin: str) -> str:
    """`owner/repo` -> the directory TPM clones it into."""
    return plugin.rstrip("/").split("/")[-1]


class WriteTmuxConfStep:
    step_id = "50_write_tmux_conf"
    title = "Writing ~/.tmux.conf..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        write_file(ctx.cfg.tmux_conf, render_tmux_conf(ctx.cfg.tmux_plugins), dry_run=ctx.dry_run)
        return state


class CreateWorkDirsStep:
    step_id = "60_create_dirs"
    title = "Creating repo and journal directories if missing..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        for d in (ctx.cfg.tmux_repo_dir, ctx.cfg.tmux_journal_dir):
            if ensure_dir(d, dry_run=ctx.dry_run):
                logger.info("Created %s", d)
            else:
                logger.warning("%s already exists. Skipping.", d)
        return state


class SessionLauncherStep:
    """Write the start-day session and alias it as `startday`.

    Uses a tmuxinator project when tmuxinator is available, otherwise a
    plain shell script driving tmux directly.
    """

    step_id = "70_session_launcher"
    title = "Setting up the start-day session..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        available = get_decision(state, TMUXINATOR_DECISION)
        if available is None:
            available = command_exists("tmuxinator")

        layout = dict(
            session=cfg.tmux_session_name,
            repo=cfg.tmux_repo_dir,
            journal=cfg.tmux_journal_dir,
        )

        if available:
            write_file(cfg.tmuxinator_project, render_tmuxinator_project(**layout), dry_run=ctx.dry_run)
            command = f"tmuxinator start {shlex.quote(cfg.tmuxinator_project.stem)}"
            alias = f"alias {ALIAS_NAME}={shlex.quote(command)}"
            launcher = "tmuxinator"
        else:
            logger.info("tmuxinator unavailable, using the vanilla startup script")
            write_file(cfg.start_day_script, render_start_day_script(**layout), mode=0o755, dry_run=ctx.dry_run)
            alias = f"alias {ALIAS_NAME}={shlex.quote(str(cfg.start_day_script))}"
            launcher = "script"

        ensure_block(cfg.shell_rc, f"{ALIAS_NAME}-alias", alias, key=f"alias {ALIAS_NAME}=", dry_run=ctx.dry_run)
        set_decision(state, "session_launcher", launcher)
        return state


class InstallTmuxPluginsStep:
    step_id = "80_install_plugins"
    title = "Installing tmux plugins via TPM..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        missing = [p for p in cfg.tmux_plugins if not (cfg.tmux_plugin_dir / plugin_dir_name(p)).is_dir()]
        if not missing:
            logger.warning("All tmux plugins already installed. Skipping.")
            return state

        installer = cfg.tmux_plugin_dir / "tpm" / "bin" / "install_plugins"
        if not installer.exists() and not ctx.dry_run:
            raise InstallFailure(f"TPM installer not found at {installer}")

        run_cmd([str(installer)], dry_run=ctx.dry_run)
        logger.info("Plugins installed: %s", ", ".join(missing))
        return state


def _report_lines(ctx: SetupCtx, state: Dict[str, Any]) -> List[str]:
    return [
        "Next steps:",
        f"  1. source {ctx.cfg.shell_rc}",
        f"  2. {ALIAS_NAME}",
        "  3. Inside tmux: Prefix + I  (to confirm plugins are loaded)",
        "",
        "  Save session:    Prefix + Ctrl+s",
        "  Restore session: Prefix + Ctrl+r",
    ]


def build_steps():
    return [
        PreflightStep(["apt-get", "git"]),
        AptInstallStep("20_install_tmux", package="tmux"),
        AptInstallStep("25_install_xclip", package="xclip"),
        OptionalAptInstallStep("30_install_tmuxinator", package="tmuxinator", decision=TMUXINATOR_DECISION),
        GitCloneStep(
            "40_install_tpm",
            label="TPM (tmux plugin manager)",
            url=lambda ctx: ctx.cfg.tmux_tpm_repo,
            dest=lambda ctx: ctx.cfg.tmux_plugin_dir / "tpm",
        ),
        WriteTmuxConfStep(),
        CreateWorkDirsStep(),
        SessionLauncherStep(),
        InstallTmuxPluginsStep(),
        ReportStep("tmux setup complete!", _report_lines),
    ]
