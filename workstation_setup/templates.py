"""Configuration file bodies written by the setup flows.

The contents are opaque to us: Lua for LazyVim, tmux's own config language,
YAML for tmuxinator, shell for the fallback launcher and TOML for Alacritty.
Only a handful of values are interpolated.
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Sequence

import yaml

MONOKAI_LUA = """\
return {
  {
    "loctvl842/monokai-pro.nvim",
    lazy = false,
    priority = 1000,
    config = function()
      require("monokai-pro").setup({
        transparent_background = false,
        terminal_colors = true,
        devicons = true,
        styles = {
          comment = { italic = true },
          keyword = { italic = true },
          type = { italic = true },
          storageclass = { italic = true },
          structure = { italic = true },
          parameter = { italic = true },
          annotation = { italic = true },
          tag_attribute = { italic = true },
        },
        filter = "@FILTER@", -- classic | octagon | pro | machine | ristretto | spectrum
        day_night = {
          enable = false,
          day_filter = "pro",
          night_filter = "spectrum",
        },
        inc_search = "background", -- underline | background
        background_clear = {
          "toggleterm",
          "telescope",
          "renamer",
          "notify",
        },
        plugins = {
          bufferline = {
            underline_selected = false,
            underline_visible = false,
            underline_fill = false,
            bold = true,
          },
          indent_blankline = {
            context_highlight = "default", -- default | pro
            context_start_underline = false,
          },
        },
        override = function(scheme) return {} end,
        override_palette = function(filter) return {} end,
        override_scheme = function(scheme, palette, colors) return {} end,
      })
      vim.cmd.colorscheme("monokai-pro")
    end,
  },
}
"""

# Tab accepts a completion, Enter is a plain newline.
BLINK_LUA = """\
return {
  "saghen/blink.cmp",
  opts = {
    keymap = {
      ["<CR>"] = {},
      ["<Tab>"] = { "accept", "fallback" },
    },
  },
}
"""


def render_monokai(filter_name: str) -> str:
    return MONOKAI_LUA.replace("@FILTER@", filter_name)


def render_extras(extras: Sequence[str]) -> str:
    lines = ["-- LazyVim extras - equivalent to selecting these in :LazyExtras", "return {"]
    for extra in extras:
        lines.append(f'  {{ import = "lazyvim.plugins.extras.{extra}" }},')
    lines.append("}")
    return "\n".join(lines) + "\n"


TMUX_CONF_HEAD = """\
## VIM-STYLE COPY MODE NAVIGATION

# Use vi-style keys for navigating and selection
set-window-option -g mode-keys vi

# 'v' to begin selection as in Vim
bind-key -T copy-mode-vi v send -X begin-selection

# 'y' to yank to system clipboard (requires xclip)
bind-key -T copy-mode-vi y send-keys -X copy-pipe-and-cancel "xclip -selection clipboard -i"

## VIM-STYLE PANE NAVIGATION
# Using Prefix + vim-key to avoid conflicts with vim-tmux-navigator and ctrl+l

bind-key 'h' select-pane -L
bind-key 'j' select-pane -D
bind-key 'k' select-pane -U
bind-key 'l' select-pane -R

## NO CONFIRM ON CLOSE

bind-key & kill-window
bind-key x kill-pane

## NVIM

# Reduce escape time for nvim
set-option -sg escape-time 10

# Enable focus events for nvim
set-option -g focus-events on

# True color support
# Replace tmux-256color with output of `echo $TERM` if colors look wrong
set-option -a terminal-features 'tmux-256color:RGB'
set -g default-terminal "tmux-256color"

######################### PLUGINS - MUST BE AT BOTTOM

"""

TMUX_CONF_TAIL = """
# Optional: restore nvim sessions via resurrect
# (with LazyVim use its own restore feature instead - leave this commented)
# set -g @resurrect-strategy-nvim 'session'

# Initialize TPM (must be the very last line)
run '~/.tmux/plugins/tpm/tpm'
"""


def render_tmux_conf(plugins: Sequence[str]) -> str:
    plugin_lines = "".join(f"set -g @plugin '{p}'\n" for p in plugins)
    return TMUX_CONF_HEAD + plugin_lines + TMUX_CONF_TAIL


def render_tmuxinator_project(*, session: str, repo: Path, journal: Path) -> str:
    # Empty panes are plain shells.
    project = {
        "name": session,
        "windows": [
            {"editor": {"root": str(repo), "panes": ["nvim ."]}},
            {"repo": {"root": str(repo), "layout": "even-horizontal", "panes": [None, None]}},
            {"journal": {"root": str(journal), "panes": [None]}},
            {"scratch": None},
        ],
    }
    return yaml.safe_dump(project, sort_keys=False, default_flow_style=False)


def render_start_day_script(*, session: str, repo: Path, journal: Path) -> str:
    return f"""\
#!/bin/bash

SESSION={shlex.quote(session)}
REPO={shlex.quote(str(repo))}
JOURNAL={shlex.quote(str(journal))}

# Attach if session already exists
tmux has-session -t "$SESSION" 2>/dev/null && tmux attach -t "$SESSION" && exit

tmux new-session -d -s "$SESSION" -n "editor" -c "$REPO"

# Window 0: nvim
tmux send-keys -t "$SESSION:0" "nvim ." Enter

# Window 1: repo shell with left/right split
tmux new-window -t "$SESSION" -n "repo" -c "$REPO"
tmux split-window -h -t "$SESSION:1" -c "$REPO"
tmux select-pane -t "$SESSION:1.0"

# Window 2: journal
tmux new-window -t "$SESSION" -n "journal" -c "$JOURNAL"

# Window 3: junk drawer
tmux new-window -t "$SESSION" -n "scratch"

# Focus window 0 on attach
tmux select-window -t "$SESSION:0"

tmux attach -t "$SESSION"
"""


def render_alacritty_config(*, theme_file: Path, font_family: str, font_size: int) -> str:
    return f"""\
import = ["{theme_file}"]

[font]
size = {font_size}

[font.normal]
family = "{font_family}"
"""
