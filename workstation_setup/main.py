from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, Optional

import yaml

from .config import load_setup_config
from .context import SetupCtx
from .errors import PreflightFailure, SetupError, UserAborted
from .lib.prompt import ReadLine, Write, console_read_line, console_write
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import run_pipeline
from .state_store import ensure_defaults, load_state, save_state
from .steps import FLOWS

logger = logging.getLogger(__name__)


DEFAULT_STATE_DIR = "~/.local/state/workstation-setup"


def default_state_path(flow: str) -> str:
    return f"{DEFAULT_STATE_DIR}/{flow}.json"


def build_steps(flow: str):
    try:
        return FLOWS[flow]()
    except KeyError:
        raise SetupError(f"Unknown flow '{flow}' (choose from: {', '.join(FLOWS)})") from None


def run(
    flow: str,
    *,
    config_path: Optional[str] = None,
    state_path: Optional[str] = None,
    log_path: str = DEFAULT_LOG_PATH,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
    dry_run: bool = False,
    assume_yes: bool = False,
    read_line: ReadLine = console_read_line,
    write: Write = console_write,
) -> Dict[str, Any]:
    """Run one provisioning flow, persisting state for resume."""

    # The log file is opened by the preflight step once its checks pass.
    configure_logging(log_path=log_path, defer_file=True)

    steps = build_steps(flow)
    cfg = load_setup_config(config_path)
    ctx = SetupCtx(cfg=cfg, flow=flow, dry_run=dry_run, assume_yes=assume_yes, read_line=read_line, write=write)

    state_path = state_path or default_state_path(flow)
    state = ensure_defaults(load_state(state_path), flow=flow)

    try:
        result = run_pipeline(
            ctx=ctx,
            state=state,
            steps=steps,
            start_at=start_at,
            stop_after=stop_after,
            force=force,
        )
    except PreflightFailure:
        # Nothing has been touched yet; leave the state file alone too.
        raise
    except Exception as e:
        state.setdefault("execution", {}).setdefault("errors", []).append(
            {
                "step": (state.get("execution") or {}).get("current_step"),
                "error": str(e),
            }
        )
        if not dry_run:
            save_state(state_path, state)
        raise

    state = result.state
    state.setdefault("execution", {})["summary"] = {
        "ran_steps": result.ran_steps,
        "skipped_steps": result.skipped_steps,
    }
    if not dry_run:
        save_state(state_path, state)
    return state


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", default=None, help="YAML file overriding the default paths, themes and plugins")
    p.add_argument("--state", default=None, help="Path to state file (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to log file")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 40_clone_lazyvim)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--force", action="store_true", help="Re-run steps even if marked completed")
    p.add_argument("--dry-run", action="store_true", help="Log commands and writes without executing them")
    p.add_argument("-y", "--yes", action="store_true", help="Assume yes when asked to overwrite a config file")


def _dispatch(flow: str, args: argparse.Namespace) -> int:
    try:
        run(
            flow,
            config_path=args.config,
            state_path=args.state,
            log_path=args.log,
            start_at=args.start_at,
            stop_after=args.stop_after,
            force=bool(args.force),
            dry_run=bool(args.dry_run),
            assume_yes=bool(args.yes),
        )
    except (KeyboardInterrupt, UserAborted):
        logger.error("Interrupted; files may be partially written.")
        return 130
    except SetupError as e:
        logger.error("%s", e)
        return 1
    except (ValueError, yaml.YAMLError, OSError) as e:
        # bad --start-at/--stop-after, a malformed state file or an unwritable target
        logger.error("%s", e)
        return 1
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="workstation-setup", description="Idempotent developer-workstation setup")
    sub = p.add_subparsers(dest="flow", required=True, metavar="FLOW")
    for flow, help_text in (
        ("neovim", "Neovim + LazyVim with theme and completion tweaks"),
        ("tmux", "tmux, TPM plugins and a start-day session"),
        ("terminal", "Alacritty with a Nerd Font and a color theme"),
    ):
        _add_common_args(sub.add_parser(flow, help=help_text))

    args = p.parse_args(argv)
    return _dispatch(args.flow, args)


def _single_flow_main(flow: str, prog: str, argv: Optional[list[str]]) -> int:
    p = argparse.ArgumentParser(prog=prog)
    _add_common_args(p)
    args = p.parse_args(argv)
    return _dispatch(flow, args)


def neovim_main(argv: Optional[list[str]] = None) -> int:
    return _single_flow_main("neovim", "setup-neovim", argv)


def tmux_main(argv: Optional[list[str]] = None) -> int:
    return _single_flow_main("tmux", "setup-tmux", argv)


def terminal_main(argv: Optional[list[str]] = None) -> int:
    return _single_flow_main("terminal", "setup-terminal", argv)


if __name__ == "__main__":
    raise SystemExit(main())
