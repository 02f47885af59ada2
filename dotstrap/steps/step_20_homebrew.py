from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict

from ..config import BootstrapConfig
from ..lib.brew import (
    Brew,
    activate_homebrew,
    find_brew,
    homebrew_prefix,
    install_homebrew,
    persist_shellenv,
    shell_profile,
)
from ..state_store import record_installed, record_skipped

logger = logging.getLogger(__name__)


class HomebrewStep:
    step_id = "20_homebrew"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = BootstrapConfig(state.get("config") or {})
        host = state.get("platform") or {}
        tag = str(host.get("tag") or "")
        prefix = homebrew_prefix(tag, str(host.get("arch") or ""))

        brew = find_brew(prefix)
        if brew is None:
            logger.info("Installing Homebrew...")
            install_homebrew(url=cfg.homebrew_install_url, dry_run=cfg.dry_run)
            persist_shellenv(shell_profile(cfg.home, tag), prefix, dry_run=cfg.dry_run)
            if not cfg.dry_run:
                activate_homebrew(prefix)
            brew = f"{prefix}/bin/brew"
            record_installed(state, "homebrew")
            logger.info("Homebrew installed")
        else:
            logger.info("Homebrew already installed")
            record_skipped(state, "homebrew")
            if shutil.which("brew") is None and not cfg.dry_run:
                # Installed under a known prefix but not on PATH in this shell.
                activate_homebrew(str(Path(brew).parents[1]))
            if cfg.brew_update:
                logger.info("Updating Homebrew...")
                Brew(brew, dry_run=cfg.dry_run).update()

        state.setdefault("execution", {})["brew"] = brew
        logger.debug("Using brew at %s (PATH=%s)", brew, os.environ.get("PATH", ""))
        return state
