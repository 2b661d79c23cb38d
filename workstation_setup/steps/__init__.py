from . import neovim, terminal, tmux

FLOWS = {
    "neovim": neovim.build_steps,
    "tmux": tmux.build_steps,
    "terminal": terminal.build_steps,
}

__all__ = [
    "FLOWS",
]
