"""Tests for the command-line entry points."""

import json
import logging

import pytest

from workstation_setup.main import main, run, tmux_main

pytestmark = pytest.mark.usefixtures("linux_x86_64", "isolated_logging")


@pytest.fixture
def config_file(tmp_path, home):
    p = tmp_path / "setup.yaml"
    p.write_text(f"home: {home}\n")
    return p


def cli_args(tmp_path, config_file, *extra):
    return [
        "--config",
        str(config_file),
        "--state",
        str(tmp_path / "state" / "tmux.json"),
        "--log",
        str(tmp_path / "setup.log"),
        *extra,
    ]


def test_tmux_flow_completes(tmp_path, home, config_file, which, runner):
    # TPM's installer would normally clone these
    for name in ("tmux-resurrect", "tokyo-night-tmux"):
        (home / ".tmux" / "plugins" / name).mkdir(parents=True)

    assert main(["tmux", *cli_args(tmp_path, config_file)]) == 0

    state = json.loads((tmp_path / "state" / "tmux.json").read_text())
    assert "70_session_launcher" in state["execution"]["completed_steps"]
    assert state["execution"]["summary"]["skipped_steps"] == []
    assert (home / ".tmux.conf").exists()
    assert (tmp_path / "setup.log").exists()


def test_single_flow_entry_point(tmp_path, home, config_file, which, runner):
    for name in ("tmux-resurrect", "tokyo-night-tmux"):
        (home / ".tmux" / "plugins" / name).mkdir(parents=True)
    assert tmux_main(cli_args(tmp_path, config_file)) == 0


def test_preflight_failure_exits_nonzero_without_writing(tmp_path, home, config_file, which, runner):
    which.available.discard("git")

    assert main(["tmux", *cli_args(tmp_path, config_file)]) == 1

    assert not (tmp_path / "state" / "tmux.json").exists()
    assert not (tmp_path / "setup.log").exists()
    assert list(home.iterdir()) == []
    assert runner.calls == []


def test_start_at_does_not_bypass_preflight(tmp_path, home, config_file, which, runner):
    which.available -= {"git", "apt-get"}

    args = cli_args(tmp_path, config_file, "--start-at", "20_install_tmux", "--stop-after", "25_install_xclip")
    assert main(["tmux", *args]) == 1

    assert runner.calls == []
    assert not (tmp_path / "state" / "tmux.json").exists()


def test_install_failure_is_recorded(tmp_path, home, config_file, which, runner):
    runner.failing.add("xclip")

    assert main(["tmux", *cli_args(tmp_path, config_file)]) == 1

    state = json.loads((tmp_path / "state" / "tmux.json").read_text())
    assert state["execution"]["errors"][0]["step"] == "25_install_xclip"
    assert "20_install_tmux" in state["execution"]["completed_steps"]


def test_malformed_yaml_state_is_reported(tmp_path, config_file, which, runner, caplog):
    state_path = tmp_path / "tmux.yaml"
    state_path.write_text("execution: [unclosed\n")
    args = ["--config", str(config_file), "--state", str(state_path), "--log", str(tmp_path / "setup.log")]

    assert main(["tmux", *args]) == 1
    assert runner.calls == []
    assert any(r.levelno == logging.ERROR for r in caplog.records)


def test_unwritable_shell_rc_is_reported(tmp_path, home, config_file, which, runner):
    (home / ".bashrc").mkdir()

    assert main(["tmux", *cli_args(tmp_path, config_file)]) == 1

    state = json.loads((tmp_path / "state" / "tmux.json").read_text())
    assert state["execution"]["errors"][0]["step"] == "70_session_launcher"


def test_unknown_step_is_rejected(tmp_path, config_file, which, runner):
    assert main(["tmux", *cli_args(tmp_path, config_file, "--start-at", "99_nope")]) == 1


def test_bad_config_is_rejected(tmp_path, which, runner):
    bad = tmp_path / "bad.yaml"
    bad.write_text("- not\n- a mapping\n")
    assert main(["terminal", "--config", str(bad), "--log", str(tmp_path / "setup.log")]) == 1


def test_closed_stdin_during_theme_pick(tmp_path, home, config_file, which, runner, monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt="": (_ for _ in ()).throw(EOFError()))
    args = cli_args(tmp_path, config_file)
    args[3] = str(tmp_path / "state" / "terminal.json")
    assert main(["terminal", *args]) == 130


def test_dry_run_touches_nothing(tmp_path, home, config_file, which, runner):
    state_path = tmp_path / "state" / "neovim.json"
    state = run(
        "neovim",
        config_path=str(config_file),
        state_path=str(state_path),
        log_path=str(tmp_path / "setup.log"),
        dry_run=True,
    )
    assert runner.calls == []
    assert list(home.iterdir()) == []
    assert not state_path.exists()
    assert state["execution"]["completed_steps"] == []


def test_flow_is_required(capsys):
    with pytest.raises(SystemExit):
        main([])
