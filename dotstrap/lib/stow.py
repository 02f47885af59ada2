from __future__ import annotations

import logging
import re
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..errors import LinkError
from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

DEFAULT_CONFLICT_FILES = (".zshrc", ".tmux.conf", ".wezterm.lua")
DEFAULT_BACKUP_PREFIX = "dotfiles_backup_"

_CONFLICT_PATTERNS = (
    re.compile(r"existing target is [^:]+: (\S+)"),
    re.compile(r"over existing target (\S+) since"),
)


class LinkState(str, Enum):
    TRY_LINK = "try_link"
    CONFLICT_DETECTED = "conflict_detected"
    BACKUP_FILES = "backup_files"
    RETRY_LINK = "retry_link"
    LINKED = "linked"
    FAIL_FATAL = "fail_fatal"


@dataclass
class LinkResult:
    state: LinkState = LinkState.TRY_LINK
    attempts: int = 0
    backup_dir: Optional[str] = None
    backed_up: List[str] = field(default_factory=list)
    unhandled_conflicts: List[str] = field(default_factory=list)
    history: List[LinkState] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "state": self.state.value,
            "attempts": self.attempts,
            "backup_dir": self.backup_dir,
            "backed_up": list(self.backed_up),
            "unhandled_conflicts": list(self.unhandled_conflicts),
        }


def parse_conflicts(stderr: str) -> List[str]:
    """Extract conflicting target paths from stow's error output."""

    found: List[str] = []
    for line in stderr.splitlines():
        for pat in _CONFLICT_PATTERNS:
            m = pat.search(line)
            if m and m.group(1) not in found:
                found.append(m.group(1))
    return found


def backup_dir_name(now: datetime, prefix: str = DEFAULT_BACKUP_PREFIX) -> str:
    return f"{prefix}{now.strftime('%Y%m%d_%H%M%S')}"


def backup_files(home: Path, backup_dir: Path, names: Sequence[str], *, dry_run: bool = False) -> List[str]:
    """Move plain files (not symlinks) at the given home-relative paths into backup_dir."""

    moved: List[str] = []
    for name in names:
        src = home / name
        if src.is_symlink() or not src.is_file():
            continue
        dst = backup_dir / name
        logger.info("Backing up ~/%s", name)
        if not dry_run:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(src), str(dst))
        moved.append(name)
    return moved


class DotfileLinker:
    """Symlink a stow package into a target directory with one backup-and-retry.

    TRY_LINK -> LINKED
    TRY_LINK -> CONFLICT_DETECTED -> BACKUP_FILES -> RETRY_LINK -> LINKED | FAIL_FATAL
    """

    def __init__(
        self,
        *,
        source_dir: Path,
        target_dir: Path,
        conflict_files: Sequence[str] = DEFAULT_CONFLICT_FILES,
        backup_prefix: str = DEFAULT_BACKUP_PREFIX,
        stow: str = "stow",
        package: str = ".",
        dry_run: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.source_dir = source_dir
        self.target_dir = target_dir
        self.conflict_files = tuple(conflict_files)
        self.backup_prefix = backup_prefix
        self.stow = stow
        self.package = package
        self.dry_run = dry_run
        self.clock = clock

    def argv(self) -> List[str]:
        return [self.stow, "-t", str(self.target_dir), self.package]

    def _attempt(self) -> CmdResult:
        return run_cmd(self.argv(), check=False, cwd=str(self.source_dir), dry_run=self.dry_run)

    def link(self) -> LinkResult:
        result = LinkResult()
        last: Optional[CmdResult] = None
        backup_dir: Optional[Path] = None

        while True:
            state = result.state
            result.history.append(state)

            if state in (LinkState.TRY_LINK, LinkState.RETRY_LINK):
                result.attempts += 1
                last = self._attempt()
                if last.ok:
                    result.state = LinkState.LINKED
                elif state is LinkState.TRY_LINK:
                    result.state = LinkState.CONFLICT_DETECTED
                else:
                    result.state = LinkState.FAIL_FATAL

            elif state is LinkState.CONFLICT_DETECTED:
                logger.warning("Conflicts detected! Backing up existing files...")
                conflicts = parse_conflicts(last.stderr if last else "")
                result.unhandled_conflicts = [c for c in conflicts if c not in self.conflict_files]
                if result.unhandled_conflicts:
                    logger.warning(
                        "Conflicts outside the backup set will not be moved: %s",
                        ", ".join(result.unhandled_conflicts),
                    )
                result.state = LinkState.BACKUP_FILES

            elif state is LinkState.BACKUP_FILES:
                backup_dir = self.target_dir / backup_dir_name(self.clock(), self.backup_prefix)
                if not self.dry_run:
                    backup_dir.mkdir(parents=True, exist_ok=True)
                result.backup_dir = str(backup_dir)
                result.backed_up = backup_files(
                    self.target_dir, backup_dir, self.conflict_files, dry_run=self.dry_run
                )
                result.state = LinkState.RETRY_LINK

            elif state is LinkState.LINKED:
                if result.backup_dir:
                    logger.info("Configuration files linked! Backups saved to: %s", result.backup_dir)
                else:
                    logger.info("Configuration files successfully linked!")
                return result

            else:
                if last is not None and last.stderr.strip():
                    logger.error("stow: %s", last.stderr.strip())
                raise LinkError(
                    f"Failed to link dotfiles. Manual intervention needed. Backup location: {backup_dir}",
                    backup_dir=result.backup_dir,
                )
