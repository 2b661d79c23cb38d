"""Tests for the Neovim + LazyVim flow."""

import logging

import pytest

from workstation_setup.errors import InstallFailure, PreflightFailure
from workstation_setup.pipeline import run_pipeline
from workstation_setup.state_store import ensure_defaults
from workstation_setup.steps import neovim

from helpers import snapshot

pytestmark = pytest.mark.usefixtures("linux_x86_64")


def run_flow(ctx, **kwargs):
    state = ensure_defaults({}, flow="neovim")
    return run_pipeline(ctx=ctx, state=state, steps=neovim.build_steps(), **kwargs).state


class TestFreshInstall:
    def test_installs_and_configures(self, ctx, cfg, home, which, runner):
        state = run_flow(ctx)

        assert runner.ran("tar", str(cfg.nvim_install_dir))
        assert runner.ran("git", "clone", cfg.nvim_starter_repo)
        assert not (cfg.nvim_config_dir / ".git").exists()

        plugins = cfg.nvim_config_dir / "lua" / "plugins"
        assert 'filter = "pro"' in (plugins / "monokai.lua").read_text()
        assert '["<Tab>"] = { "accept", "fallback" }' in (plugins / "blink.lua").read_text()
        extras = (plugins / "extras.lua").read_text()
        assert '{ import = "lazyvim.plugins.extras.lang.clangd" },' in extras
        assert '{ import = "lazyvim.plugins.extras.lang.python" },' in extras

        rc = (home / ".bashrc").read_text()
        assert f'export PATH="$PATH":{cfg.nvim_install_dir / "bin"}' in rc
        assert state["execution"]["decisions"]["nvim_installed_to"] == str(cfg.nvim_install_dir)

    def test_existing_config_is_backed_up(self, ctx, cfg, home, which, runner):
        (home / ".config" / "nvim").mkdir(parents=True)
        (home / ".config" / "nvim" / "init.vim").write_text("set number\n")
        (home / ".local" / "share" / "nvim").mkdir(parents=True)

        state = run_flow(ctx)

        assert (home / ".config" / "nvim.bak" / "init.vim").read_text() == "set number\n"
        assert (home / ".local" / "share" / "nvim.bak").is_dir()
        assert (home / ".config" / "nvim" / "lazyvim.json").exists()
        assert len(state["execution"]["decisions"]["nvim_backups"]) == 2

    def test_existing_nvim_on_path_is_not_reinstalled(self, ctx, which, runner, caplog):
        which.available.add("nvim")
        with caplog.at_level(logging.INFO):
            run_flow(ctx)
        assert not runner.ran("tar")
        assert "already installed" in caplog.text


class TestRerun:
    def test_second_run_changes_nothing(self, ctx, home, which, runner, caplog):
        run_flow(ctx)
        before = snapshot(home)
        calls = len(runner.calls)

        caplog.clear()
        with caplog.at_level(logging.INFO):
            run_flow(ctx, force=True)

        assert snapshot(home) == before
        assert len(runner.calls) == calls
        assert "Backing up" not in caplog.text
        assert "Added" not in caplog.text

    def test_custom_filter_and_extras(self, ctx, cfg, which, runner):
        cfg.raw["neovim"]["monokai_filter"] = "spectrum"
        cfg.raw["neovim"]["extras"] = ["lang.rust"]
        run_flow(ctx)
        plugins = cfg.nvim_config_dir / "lua" / "plugins"
        assert 'filter = "spectrum"' in (plugins / "monokai.lua").read_text()
        assert "lang.rust" in (plugins / "extras.lua").read_text()
        assert "clangd" not in (plugins / "extras.lua").read_text()


class TestFailures:
    def test_missing_curl_stops_before_side_effects(self, ctx, home, which, runner):
        which.available.discard("curl")
        with pytest.raises(PreflightFailure, match="curl"):
            run_flow(ctx)
        assert runner.calls == []
        assert snapshot(home) == {}

    def test_config_and_backup_both_present(self, ctx, home, which, runner, caplog):
        config = home / ".config" / "nvim"
        config.mkdir(parents=True)
        (config / "init.lua").write_text("-- current\n")
        (home / ".config" / "nvim.bak").mkdir()
        (home / ".config" / "nvim.bak" / "init.lua").write_text("-- older\n")

        with pytest.raises(InstallFailure, match="not empty"):
            run_flow(ctx)

        assert (config / "init.lua").read_text() == "-- current\n"
        assert (home / ".config" / "nvim.bak" / "init.lua").read_text() == "-- older\n"
        assert not runner.ran("clone")

    def test_failed_download_is_fatal(self, ctx, which, runner):
        runner.failing.add("curl")
        with pytest.raises(InstallFailure):
            run_flow(ctx)
