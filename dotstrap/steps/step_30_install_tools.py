from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import BootstrapConfig
from ..lib.brew import Brew
from ..lib.hostinfo import manifest_platform
from ..lib.manifests import load_packages_manifest
from ..plan import Installer, execute_plan, parse_sections, plan_items

logger = logging.getLogger(__name__)


class InstallToolsStep:
    step_id = "30_install_tools"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = BootstrapConfig(state.get("config") or {})
        exe = state.get("execution") or {}
        platform = manifest_platform(str((state.get("platform") or {}).get("tag") or ""))

        brew = Brew(str(exe.get("brew") or "brew"), dry_run=cfg.dry_run)
        installer = Installer(brew, home=cfg.home, dry_run=cfg.dry_run)

        for section in parse_sections(load_packages_manifest(cfg.manifest)):
            if not section.applies_to(platform):
                logger.info("=== Skipping %s (%s environment) ===", section.title, platform)
                continue

            logger.info("=== %s ===", section.title)
            items = []
            for item in section.items:
                if item.applies_to(platform):
                    items.append(item)
                else:
                    logger.info("Skipping %s (not needed on %s)", item.name, platform)

            execute_plan(plan_items(items, installer.is_present), installer, state)

        return state
