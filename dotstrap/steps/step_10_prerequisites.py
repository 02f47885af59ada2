from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import BootstrapConfig
from ..errors import PrerequisiteMissing
from ..lib.command import run_cmd
from ..lib.hostinfo import is_mac

logger = logging.getLogger(__name__)


class PrerequisitesStep:
    step_id = "10_prerequisites"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = BootstrapConfig(state.get("config") or {})
        tag = str((state.get("platform") or {}).get("tag") or "")

        if not is_mac(tag):
            logger.info("Skipping Xcode Command Line Tools (%s environment)", tag)
            return state

        if run_cmd(["xcode-select", "-p"], check=False, quiet=True).ok:
            logger.info("Xcode Command Line Tools already installed")
            return state

        logger.info("Installing Xcode Command Line Tools...")
        # Exits non-zero when an install request is already pending.
        run_cmd(["xcode-select", "--install"], check=False, dry_run=cfg.dry_run)

        if cfg.dry_run:
            logger.warning("Xcode Command Line Tools missing; a real run would stop here")
            return state

        raise PrerequisiteMissing(
            "Please complete the Xcode Command Line Tools installation and re-run this script"
        )
