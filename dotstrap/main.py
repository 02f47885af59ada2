from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, Optional

from . import __version__
from .config import BootstrapConfig, load_config_file, merge_overrides
from .errors import BootstrapError
from .lib.hostinfo import detect_host, is_unknown
from .logging_utils import configure_logging
from .pipeline import run_pipeline
from .state_store import ensure_defaults, save_report
from .steps import (
    HomebrewStep,
    InstallToolsStep,
    LinkDotfilesStep,
    PrerequisitesStep,
    SummaryStep,
)

logger = logging.getLogger(__name__)

BANNER = """\
+-----------------------------------------------------------+
|                                                           |
|          Dev Environment Bootstrap Installer              |
|                                                           |
+-----------------------------------------------------------+"""


def build_steps():
    return [
        PrerequisitesStep(),
        HomebrewStep(),
        InstallToolsStep(),
        LinkDotfilesStep(),
        SummaryStep(),
    ]


def run(
    *,
    config: Dict[str, Any],
    log_path: Optional[str] = None,
    verbose: bool = False,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    report_path: Optional[str] = None,
    kernel_name: Optional[str] = None,
) -> Dict[str, Any]:
    """Run the bootstrap pipeline and return the final state."""

    configure_logging(log_path=log_path, level=logging.DEBUG if verbose else logging.INFO)

    state = ensure_defaults({"config": dict(config)})
    state["platform"] = detect_host(kernel_name)
    cfg = BootstrapConfig(state["config"])
    tag = state["platform"]["tag"]

    print(BANNER)
    logger.info("Detected OS: %s", tag)
    if is_unknown(tag):
        logger.warning("Unrecognized kernel %r; continuing with the Linux package set", state["platform"]["kernel"])
    logger.info("Starting installation from: %s", cfg.dotfiles_dir)
    if cfg.dry_run:
        logger.info("Dry run: commands are logged, not executed")

    try:
        result = run_pipeline(
            state=state,
            steps=build_steps(),
            start_at=start_at,
            stop_after=stop_after,
        )
        state = result.state
        state["execution"]["ran_steps"] = result.ran_steps
        return state
    except BootstrapError as e:
        state["execution"]["errors"].append(
            {"step": state["execution"].get("current_step"), "error": str(e)}
        )
        raise
    except Exception as e:
        logger.exception("Bootstrap failed")
        state["execution"]["errors"].append(
            {"step": state["execution"].get("current_step"), "error": str(e)}
        )
        raise
    finally:
        if report_path:
            save_report(report_path, state)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="dotstrap",
        description="Install developer tooling with Homebrew and link dotfiles with GNU stow.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--config", default=None, help="YAML config file")
    p.add_argument("--dotfiles-dir", default=None, help="Stow source directory (default: cwd)")
    p.add_argument("--home", default=None, help="Link target directory (default: $HOME)")
    p.add_argument("--manifest", default=None, help="Package manifest YAML (default: bundled)")
    p.add_argument("--log", default=None, help="Also write a log file")
    p.add_argument("--report", default=None, help="Write the run state to a .json/.yaml file")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 30_install_tools)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--no-update", action="store_true", help="Skip 'brew update'")
    p.add_argument("--dry-run", action="store_true", help="Log commands without running them")
    p.add_argument("-v", "--verbose", action="store_true")

    args = p.parse_args(argv)

    step_ids = [s.step_id for s in build_steps()]
    for flag, value in (("--start-at", args.start_at), ("--stop-after", args.stop_after)):
        if value is not None and value not in step_ids:
            p.error(f"{flag}: unknown step {value!r} (choose from {', '.join(step_ids)})")

    try:
        raw = load_config_file(args.config) if args.config else {}
    except (FileNotFoundError, ValueError) as e:
        p.error(f"--config: {e}")
    config = merge_overrides(
        raw,
        {
            "dotfiles_dir": args.dotfiles_dir,
            "home": args.home,
            "manifest": args.manifest,
            "dry_run": True if args.dry_run else None,
            "brew_update": False if args.no_update else None,
        },
    )

    try:
        run(
            config=config,
            log_path=args.log,
            verbose=bool(args.verbose),
            start_at=args.start_at,
            stop_after=args.stop_after,
            report_path=args.report,
        )
    except BootstrapError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
