from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import BootstrapConfig
from ..lib.manifests import load_instructions
from ..report import render_instructions, render_linked_paths, render_summary, section_header
from ..state_store import tracked

logger = logging.getLogger(__name__)


class SummaryStep:
    step_id = "90_summary"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = BootstrapConfig(state.get("config") or {})
        exe = state.get("execution") or {}
        tag = str((state.get("platform") or {}).get("tag") or "")
        instructions = load_instructions()

        lines = []
        if (exe.get("link") or {}).get("state") == "linked":
            linked = cfg.linked_paths
            if linked is None:
                linked = list(instructions.get("linked_paths") or [])
            lines += render_linked_paths(linked)

        installed, skipped = tracked(state)
        lines += section_header("Installation Summary")
        lines += render_summary(installed, skipped)
        lines += section_header("Post-Installation Steps")
        lines += render_instructions(tag, str(cfg.dotfiles_dir), instructions)

        print("\n".join(lines))
        logger.info("Bootstrap complete! Follow the manual steps above to finish setup.")
        return state
