from __future__ import annotations

import logging
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


def repo_present(dest: Path) -> bool:
    # Any existing directory counts; contents are not verified.
    return dest.is_dir()


def clone(url: str, dest: Path, *, dry_run: bool = False) -> None:
    if not dry_run:
        dest.parent.mkdir(parents=True, exist_ok=True)
    run_cmd(["git", "clone", url, str(dest)], capture=False, dry_run=dry_run)
