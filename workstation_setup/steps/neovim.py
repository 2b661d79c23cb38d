from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Any, Dict, List

from ..context import SetupCtx
from ..errors import InstallFailure
from ..lib.command import command_path
from ..lib.download import download_and_extract_tarball
from ..lib.fsops import backup_dir, write_file
from ..lib.git import git_clone
from ..lib.shellrc import ensure_block
from ..state_store import get_decision, set_decision
from ..templates import BLINK_LUA, render_extras, render_monokai
from .common import PreflightStep, ReportStep

logger = logging.getLogger(__name__)

# Present at the root of every LazyVim starter checkout.
LAZYVIM_MARKER = "lazyvim.json"


def _has_lazyvim(config_dir: Path) -> bool:
    return (config_dir / LAZYVIM_MARKER).is_file()


def _needs_root(path: Path, home: Path) -> bool:
    try:
        return not path.resolve().is_relative_to(home.resolve())
    except OSError:
        return True


class InstallNeovimStep:
    step_id = "20_install_neovim"
    title = "Installing Neovim..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        bundled = cfg.nvim_install_dir / "bin" / "nvim"

        found = command_path("nvim")
        if found:
            logger.warning("Neovim is already installed at %s. Skipping installation.", found)
            return state
        if bundled.exists():
            logger.warning("Neovim is already installed at %s. Skipping installation.", bundled)
            return state

        download_and_extract_tarball(
            cfg.nvim_release_url,
            cfg.nvim_install_dir,
            strip_components=1,
            sudo=_needs_root(cfg.nvim_install_dir, cfg.home),
            dry_run=ctx.dry_run,
        )
        set_decision(state, "nvim_installed_to", str(cfg.nvim_install_dir))
        logger.info("Neovim installed into %s", cfg.nvim_install_dir)
        return state


class IntegratePathStep:
    step_id = "25_integrate_path"
    title = "Adding Neovim to PATH..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        bin_dir = cfg.nvim_install_dir / "bin"

        if not (bin_dir.is_dir() or get_decision(state, "nvim_installed_to")):
            logger.info("Neovim is not installed under %s; leaving PATH alone.", cfg.nvim_install_dir)
            return state

        export = f'export PATH="$PATH":{shlex.quote(str(bin_dir))}'
        ensure_block(cfg.shell_rc, "nvim-path", export, key=export, dry_run=ctx.dry_run)
        return state


class BackupConfigStep:
    step_id = "30_backup_config"
    title = "Backing up existing Neovim state..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        if _has_lazyvim(cfg.nvim_config_dir):
            logger.warning("LazyVim config already present at %s. Skipping backup.", cfg.nvim_config_dir)
            return state

        backups: List[str] = []
        for d in cfg.nvim_data_dirs:
            bak = backup_dir(d, dry_run=ctx.dry_run)
            if bak is not None:
                backups.append(str(bak))
        if backups:
            set_decision(state, "nvim_backups", backups)
        return state


class CloneStarterStep:
    step_id = "40_clone_lazyvim"
    title = "Installing LazyVim..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        config_dir = ctx.cfg.nvim_config_dir
        if _has_lazyvim(config_dir):
            logger.warning("LazyVim config already exists at %s. Skipping clone.", config_dir)
            return state

        if config_dir.is_dir() and any(config_dir.iterdir()):
            raise InstallFailure(
                f"{config_dir} is not empty and could not be backed up. Move it aside and re-run."
            )

        git_clone(ctx.cfg.nvim_starter_repo, config_dir, detach=True, dry_run=ctx.dry_run)
        logger.info("LazyVim starter config cloned.")
        return state


class WritePluginConfigStep:
    step_id = "50_write_plugins"
    title = "Writing LazyVim plugin config..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        plugins = cfg.nvim_config_dir / "lua" / "plugins"

        # Monokai Pro colorscheme
        write_file(plugins / "monokai.lua", render_monokai(cfg.nvim_monokai_filter), dry_run=ctx.dry_run)
        # blink.cmp: Tab to accept
        write_file(plugins / "blink.lua", BLINK_LUA, dry_run=ctx.dry_run)
        # LazyExtras for C/C++ work
        write_file(plugins / "extras.lua", render_extras(cfg.nvim_extras), dry_run=ctx.dry_run)
        return state


def _report_lines(ctx: SetupCtx, state: Dict[str, Any]) -> List[str]:
    return [
        "Next steps:",
        f"  1. Reload your shell:    source {ctx.cfg.shell_rc}",
        "  2. Launch Neovim:        nvim",
        "  3. Wait for plugins to finish installing (Lazy will run automatically)",
        "  4. For C/C++ projects, make sure compile_commands.json is present:",
        "       - CMake:  cmake -DCMAKE_EXPORT_COMPILE_COMMANDS=ON <src_dir>",
        "       - Make:   bear -- make",
        "       - SCons:  use env.CompilationDatabase('compile_commands.json')",
        "",
        "  Tip: run :checkhealth in Neovim to diagnose any missing dependencies.",
    ]


def build_steps():
    return [
        PreflightStep(["curl", "git", "tar"], machine="x86_64"),
        InstallNeovimStep(),
        IntegratePathStep(),
        BackupConfigStep(),
        CloneStarterStep(),
        WritePluginConfigStep(),
        ReportStep("Neovim setup complete!", _report_lines),
    ]
