from __future__ import annotations

import logging
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


def download_file(url: str, dest: Path, *, dry_run: bool = False) -> None:
    if not dry_run:
        dest.parent.mkdir(parents=True, exist_ok=True)
    run_cmd(["curl", "-fL", url, "-o", str(dest)], capture=False, dry_run=dry_run)
