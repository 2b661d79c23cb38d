from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

from ..context import SetupCtx
from ..errors import ConfigError
from ..lib.download import download_and_unzip, download_file
from ..lib.fonts import font_installed, refresh_font_cache
from ..lib.fsops import write_file
from ..lib.prompt import confirm, pick_option
from ..state_store import get_decision, set_decision
from ..templates import render_alacritty_config
from .common import AptInstallStep, PreflightStep, ReportStep

logger = logging.getLogger(__name__)

THEME_DECISION = "theme"


def theme_path(ctx: SetupCtx, name: str) -> Path:
    return ctx.cfg.terminal_config_dir / f"{name}.toml"


class InstallFontStep:
    step_id = "30_install_font"
    title = "Installing Nerd Font..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        family = ctx.cfg.font_family
        if font_installed(family):
            logger.warning("%s already installed. Skipping.", family)
            return state

        download_and_unzip(ctx.cfg.font_url, ctx.cfg.font_dir, dry_run=ctx.dry_run)
        refresh_font_cache(dry_run=ctx.dry_run)
        logger.info("Font installed and cache refreshed.")
        return state


class DownloadThemesStep:
    step_id = "40_download_themes"
    title = "Downloading themes..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        for name, url in ctx.cfg.themes.items():
            dest = theme_path(ctx, name)
            if dest.exists():
                logger.warning("Theme '%s' already exists. Skipping.", name)
                continue
            download_file(url, dest, dry_run=ctx.dry_run)
            logger.info("Downloaded: %s", name)
        return state


class PickThemeStep:
    step_id = "50_pick_theme"
    title = "Choosing a color theme..."

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        names = list(ctx.cfg.themes)

        selected = ctx.cfg.theme
        if selected is not None:
            logger.info("Using configured theme: %s", selected)
        else:
            previous = get_decision(state, THEME_DECISION)
            if previous in names:
                logger.warning("Theme '%s' already selected. Skipping.", previous)
                selected = previous
            else:
                idx = pick_option(names, ctx.read_line, ctx.write, title="Available themes:")
                selected = names[idx]
                logger.info("Selected theme: %s", selected)

        set_decision(state, THEME_DECISION, selected)
        return state


class WriteTerminalConfigStep:
    step_id = "60_write_config"
    title = "Writing Alacritty config..."

    def _confirm_overwrite(self, ctx: SetupCtx, path: Path) -> bool:
        logger.warning("Config file already exists at %s", path)
        if ctx.assume_yes:
            return True
        return confirm("Overwrite?", ctx.read_line)

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        theme = get_decision(state, THEME_DECISION)
        if theme not in cfg.themes:
            raise ConfigError("No theme selected; run the 50_pick_theme step first.")

        body = render_alacritty_config(
            theme_file=theme_path(ctx, theme),
            font_family=cfg.font_family,
            font_size=cfg.font_size,
        )
        write_file(
            cfg.terminal_config_file,
            body,
            confirm=lambda p: self._confirm_overwrite(ctx, p),
            dry_run=ctx.dry_run,
        )
        return state


def _report_lines(ctx: SetupCtx, state: Dict[str, Any]) -> List[str]:
    return [
        "Launch Alacritty to see your new setup.",
        "",
        "  To switch themes later, update the import line in:",
        f"  {ctx.cfg.terminal_config_file}",
    ]


def build_steps():
    return [
        PreflightStep(["curl", "unzip", "fc-cache", "apt-get"]),
        AptInstallStep("20_install_alacritty", package="alacritty", label="Alacritty"),
        InstallFontStep(),
        DownloadThemesStep(),
        PickThemeStep(),
        WriteTerminalConfigStep(),
        ReportStep("All done!", _report_lines),
    ]
