from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError

NVIM_RELEASE_URL = "https://github.com/neovim/neovim/releases/latest/download/nvim-linux-x86_64.tar.gz"
LAZYVIM_STARTER_REPO = "https://github.com/LazyVim/starter"
TPM_REPO = "https://github.com/tmux-plugins/tpm"
JETBRAINS_MONO_URL = "https://github.com/ryanoasis/nerd-fonts/releases/download/v3.4.0/JetBrainsMono.zip"

DEFAULT_NVIM_EXTRAS = [
    "lang.clangd",
    "lang.cmake",
    "lang.git",
    "lang.json",
    "lang.markdown",
    "lang.python",
]

DEFAULT_TMUX_PLUGINS = [
    "tmux-plugins/tpm",
    "tmux-plugins/tmux-resurrect",
    "janoamaral/tokyo-night-tmux",
]

_ROSE_PINE = "https://raw.githubusercontent.com/rose-pine/alacritty/refs/heads/main/dist"
_TOKYO_NIGHT = "https://raw.githubusercontent.com/zatchheems/tokyo-night-alacritty-theme/refs/heads/main"

DEFAULT_THEMES: Dict[str, str] = {
    "rose-pine": f"{_ROSE_PINE}/rose-pine.toml",
    "rose-pine-moon": f"{_ROSE_PINE}/rose-pine-moon.toml",
    "rose-pine-dawn": f"{_ROSE_PINE}/rose-pine-dawn.toml",
    "tokyo-night": f"{_TOKYO_NIGHT}/tokyo-night.toml",
    "tokyo-night-storm": f"{_TOKYO_NIGHT}/tokyo-night-storm.toml",
}

MONOKAI_FILTERS = ("classic", "octagon", "pro", "machine", "ristretto", "spectrum")


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    sec = raw.get(name) or {}
    if not isinstance(sec, dict):
        raise ConfigError(f"config section '{name}' must be a mapping")
    return sec


@dataclass(frozen=True)
class SetupConfig:
    """Typed view over the raw YAML mapping.

    Every value falls back to the stock workstation layout, so an empty
    mapping reproduces the default setup.
    """

    raw: Dict[str, Any]

    @property
    def home(self) -> Path:
        home = self.raw.get("home")
        return Path(str(home)).expanduser() if home else Path.home()

    def path(self, value: str) -> Path:
        """Resolve `value`, expanding a leading `~` against `home`."""
        if value == "~" or value.startswith("~/"):
            return self.home / value[2:]
        return Path(value)

    @property
    def shell_rc(self) -> Path:
        return self.path(str(self.raw.get("shell_rc") or "~/.bashrc"))

    # neovim

    @property
    def nvim_install_dir(self) -> Path:
        return self.path(str(_section(self.raw, "neovim").get("install_dir") or "/opt/nvim"))

    @property
    def nvim_release_url(self) -> str:
        return str(_section(self.raw, "neovim").get("release_url") or NVIM_RELEASE_URL)

    @property
    def nvim_config_dir(self) -> Path:
        return self.path(str(_section(self.raw, "neovim").get("config_dir") or "~/.config/nvim"))

    @property
    def nvim_data_dirs(self) -> List[Path]:
        return [
            self.nvim_config_dir,
            self.path("~/.local/share/nvim"),
            self.path("~/.local/state/nvim"),
            self.path("~/.cache/nvim"),
        ]

    @property
    def nvim_starter_repo(self) -> str:
        return str(_section(self.raw, "neovim").get("starter_repo") or LAZYVIM_STARTER_REPO)

    @property
    def nvim_monokai_filter(self) -> str:
        value = str(_section(self.raw, "neovim").get("monokai_filter") or "pro")
        if value not in MONOKAI_FILTERS:
            raise ConfigError(f"neovim.monokai_filter must be one of {', '.join(MONOKAI_FILTERS)}")
        return value

    @property
    def nvim_extras(self) -> List[str]:
        extras = _section(self.raw, "neovim").get("extras")
        if extras is None:
            return list(DEFAULT_NVIM_EXTRAS)
        if not isinstance(extras, list):
            raise ConfigError("neovim.extras must be a list")
        return [str(e).strip() for e in extras if str(e).strip()]

    # tmux

    @property
    def tmux_repo_dir(self) -> Path:
        return self.path(str(_section(self.raw, "tmux").get("repo_dir") or "~/my-repo"))

    @property
    def tmux_journal_dir(self) -> Path:
        return self.path(str(_section(self.raw, "tmux").get("journal_dir") or "~/my-journals"))

    @property
    def tmux_session_name(self) -> str:
        return str(_section(self.raw, "tmux").get("session_name") or "dev")

    @property
    def tmux_plugins(self) -> List[str]:
        plugins = _section(self.raw, "tmux").get("plugins")
        if plugins is None:
            return list(DEFAULT_TMUX_PLUGINS)
        if not isinstance(plugins, list):
            raise ConfigError("tmux.plugins must be a list")
        return [str(p).strip() for p in plugins if str(p).strip()]

    @property
    def tmux_tpm_repo(self) -> str:
        return str(_section(self.raw, "tmux").get("tpm_repo") or TPM_REPO)

    @property
    def tmux_plugin_dir(self) -> Path:
        return self.path("~/.tmux/plugins")

    @property
    def tmux_conf(self) -> Path:
        return self.path("~/.tmux.conf")

    @property
    def tmuxinator_project(self) -> Path:
        return self.path("~/.config/tmuxinator/start-day.yml")

    @property
    def start_day_script(self) -> Path:
        return self.path("~/start-day.sh")

    # terminal

    @property
    def terminal_config_dir(self) -> Path:
        return self.path(str(_section(self.raw, "terminal").get("config_dir") or "~/.config/alacritty"))

    @property
    def terminal_config_file(self) -> Path:
        return self.terminal_config_dir / "alacritty.toml"

    @property
    def font_dir(self) -> Path:
        default = "~/.local/share/fonts/JetBrainsMono"
        return self.path(str(_section(self.raw, "terminal").get("font_dir") or default))

    @property
    def font_family(self) -> str:
        return str(_section(self.raw, "terminal").get("font_family") or "JetBrainsMono Nerd Font")

    @property
    def font_size(self) -> int:
        value = _section(self.raw, "terminal").get("font_size", 14)
        try:
            size = int(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"terminal.font_size must be an integer, got {value!r}") from e
        if size <= 0:
            raise ConfigError("terminal.font_size must be positive")
        return size

    @property
    def font_url(self) -> str:
        return str(_section(self.raw, "terminal").get("font_url") or JETBRAINS_MONO_URL)

    @property
    def themes(self) -> Dict[str, str]:
        themes = _section(self.raw, "terminal").get("themes")
        if themes is None:
            return dict(DEFAULT_THEMES)
        if not isinstance(themes, dict) or not themes:
            raise ConfigError("terminal.themes must be a non-empty mapping of name -> url")
        return {str(k): str(v) for k, v in themes.items()}

    @property
    def theme(self) -> Optional[str]:
        value = _section(self.raw, "terminal").get("theme")
        if value is None:
            return None
        name = str(value)
        if name not in self.themes:
            raise ConfigError(f"terminal.theme '{name}' is not one of: {', '.join(self.themes)}")
        return name


def load_setup_config(path: Optional[str]) -> SetupConfig:
    if not path:
        return SetupConfig(raw={})

    p = Path(path).expanduser()
    if not p.exists():
        raise ConfigError(f"config file not found: {path}")

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError("config file must be YAML")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")

    return SetupConfig(raw=raw)
