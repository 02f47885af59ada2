from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import BootstrapConfig
from ..errors import PrerequisiteMissing
from ..lib.command import command_exists
from ..lib.stow import DotfileLinker

logger = logging.getLogger(__name__)


class LinkDotfilesStep:
    step_id = "60_link_dotfiles"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = BootstrapConfig(state.get("config") or {})
        source = cfg.dotfiles_dir
        home = cfg.home

        if not source.is_dir():
            raise PrerequisiteMissing(f"Dotfiles directory not found: {source}")
        if not cfg.dry_run and not command_exists("stow"):
            raise PrerequisiteMissing("GNU stow is not on PATH; install it with: brew install stow")

        logger.info("=== Linking Configuration Files with GNU Stow ===")
        logger.info("Using stow to symlink dotfiles from %s to %s...", source, home)

        linker = DotfileLinker(
            source_dir=source,
            target_dir=home,
            conflict_files=cfg.conflict_files,
            backup_prefix=cfg.backup_prefix,
            dry_run=cfg.dry_run,
        )
        result = linker.link()
        state.setdefault("execution", {})["link"] = result.as_dict()
        return state
