"""
Pytest fixtures for workstation-setup tests.

Nothing here touches the real home directory, the network or the package
manager: `home` is a tmp dir, `shutil.which` answers from a set, and every
external command goes through `FakeRunner` instead of subprocess.
"""

import logging
import platform
import subprocess
from pathlib import Path

import pytest

from workstation_setup.config import SetupConfig
from workstation_setup.context import SetupCtx


# ═══════════════════════════════════════════════════════════════════════════════
# Fakes
# ═══════════════════════════════════════════════════════════════════════════════


class FakeWhich:
    def __init__(self, available=()):
        self.available = set(available)

    def __call__(self, name, *args, **kwargs):
        if name in self.available:
            return f"/usr/bin/{name}"
        return None


class FakeRunner:
    """Stand-in for subprocess.run that records argv and simulates effects."""

    def __init__(self):
        self.calls = []
        self.failing = set()
        self.stdout = {}
        self.effects = []

    def __call__(self, argv, **kwargs):
        argv = list(argv)
        self.calls.append(argv)
        if self.failing & set(argv):
            return subprocess.CompletedProcess(argv, 100, "", "E: Unable to locate package")
        for effect in self.effects:
            effect(argv)
        name = argv[1] if argv[0] == "sudo" else argv[0]
        return subprocess.CompletedProcess(argv, 0, self.stdout.get(name, ""), "")

    def ran(self, *tokens):
        return [c for c in self.calls if all(t in c for t in tokens)]


def _arg_after(argv, flag):
    return argv[argv.index(flag) + 1]


def simulate_filesystem(argv):
    """Create what the real tools would leave behind."""
    if "clone" in argv:
        dest = Path(argv[-1])
        dest.mkdir(parents=True, exist_ok=True)
        (dest / ".git").mkdir(exist_ok=True)
        if "starter" in argv[-2]:
            (dest / "lazyvim.json").write_text("{}\n")
        if dest.name == "tpm":
            (dest / "bin").mkdir(exist_ok=True)
            (dest / "bin" / "install_plugins").write_text("#!/bin/sh\n")
    elif "curl" in argv:
        dest = Path(_arg_after(argv, "-o"))
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text("# downloaded\n")
    elif "tar" in argv:
        dest = Path(_arg_after(argv, "-C"))
        (dest / "bin").mkdir(parents=True, exist_ok=True)
        (dest / "bin" / "nvim").write_text("")
    elif "unzip" in argv:
        dest = Path(_arg_after(argv, "-d"))
        dest.mkdir(parents=True, exist_ok=True)
        (dest / "JetBrainsMonoNerdFont-Regular.ttf").write_text("")
    elif "mkdir" in argv:
        Path(argv[-1]).mkdir(parents=True, exist_ok=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def home(tmp_path):
    h = tmp_path / "home"
    h.mkdir()
    return h


@pytest.fixture
def cfg(home):
    return SetupConfig(
        raw={
            "home": str(home),
            "neovim": {"install_dir": str(home / "opt" / "nvim")},
        }
    )


@pytest.fixture
def which(monkeypatch):
    fake = FakeWhich(["sudo", "curl", "git", "tar", "unzip", "fc-cache", "fc-list", "apt-get"])
    monkeypatch.setattr("shutil.which", fake)
    return fake


@pytest.fixture
def runner(monkeypatch):
    fake = FakeRunner()
    fake.effects.append(simulate_filesystem)
    monkeypatch.setattr("workstation_setup.lib.command.subprocess.run", fake)
    return fake


@pytest.fixture
def linux_x86_64(monkeypatch):
    monkeypatch.setattr(platform, "system", lambda: "Linux")
    monkeypatch.setattr(platform, "machine", lambda: "x86_64")


@pytest.fixture
def answers():
    """Scripted stdin: append strings, read_line pops them in order."""
    return []


@pytest.fixture
def console():
    """Lines written to the terminal by steps and prompts."""
    return []


@pytest.fixture
def ctx(cfg, answers, console):
    def read_line(prompt):
        console.append(prompt)
        return answers.pop(0) if answers else None

    return SetupCtx(cfg=cfg, flow="test", read_line=read_line, write=console.append)


@pytest.fixture
def isolated_logging():
    """Undo configure_logging() so each test gets its own log file."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    for attr in ("_workstation_setup_configured", "_workstation_setup_log_path", "_workstation_setup_pending"):
        if hasattr(root, attr):
            delattr(root, attr)
