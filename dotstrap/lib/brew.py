from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import MutableMapping, Optional

from ..errors import PrerequisiteMissing
from .command import run_cmd
from .hostinfo import is_mac

logger = logging.getLogger(__name__)

HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"

_MAC_PREFIXES = {
    "arm64": "/opt/homebrew",
    "amd64": "/usr/local",
}
LINUX_PREFIX = "/home/linuxbrew/.linuxbrew"


def homebrew_prefix(tag: str, arch: str) -> str:
    if is_mac(tag):
        return _MAC_PREFIXES.get(arch, "/usr/local")
    return LINUX_PREFIX


def homebrew_repository(prefix: str) -> str:
    # Intel macs keep the git checkout apart from the prefix.
    if prefix == "/usr/local":
        return "/usr/local/Homebrew"
    if prefix == LINUX_PREFIX:
        return f"{LINUX_PREFIX}/Homebrew"
    return prefix


def shell_profile(home: Path, tag: str) -> Path:
    return home / (".zprofile" if is_mac(tag) else ".profile")


def shellenv_line(prefix: str) -> str:
    return f'eval "$({prefix}/bin/brew shellenv)"'


def find_brew(prefix: Optional[str] = None) -> Optional[str]:
    """Locate the brew executable on PATH or under a known prefix."""

    found = shutil.which("brew")
    if found:
        return found
    if prefix:
        candidate = Path(prefix) / "bin" / "brew"
        if candidate.exists():
            return str(candidate)
    return None


def persist_shellenv(profile: Path, prefix: str, *, dry_run: bool = False) -> bool:
    """Append the shellenv line to a login profile. Returns False if already present."""

    line = shellenv_line(prefix)
    existing = profile.read_text(encoding="utf-8") if profile.exists() else ""
    if line in existing.splitlines():
        logger.info("%s already sets up Homebrew", profile)
        return False

    if dry_run:
        logger.info("Would append %r to %s", line, profile)
        return True

    profile.parent.mkdir(parents=True, exist_ok=True)
    with profile.open("a", encoding="utf-8") as fh:
        if existing and not existing.endswith("\n"):
            fh.write("\n")
        fh.write(line + "\n")
    logger.info("Added Homebrew to %s", profile)
    return True


def activate_homebrew(prefix: str, environ: MutableMapping[str, str] = os.environ) -> None:
    """Apply what ``brew shellenv`` exports to the current process."""

    environ["HOMEBREW_PREFIX"] = prefix
    environ["HOMEBREW_CELLAR"] = f"{prefix}/Cellar"
    environ["HOMEBREW_REPOSITORY"] = homebrew_repository(prefix)

    path = [p for p in environ.get("PATH", "").split(os.pathsep) if p]
    for d in (f"{prefix}/sbin", f"{prefix}/bin"):
        if d in path:
            path.remove(d)
        path.insert(0, d)
    environ["PATH"] = os.pathsep.join(path)


def install_homebrew(*, url: str = HOMEBREW_INSTALL_URL, dry_run: bool = False) -> None:
    """Download the official installer script and run it interactively."""

    with tempfile.TemporaryDirectory(prefix="dotstrap-") as tmp:
        script = str(Path(tmp) / "install.sh")
        run_cmd(["curl", "-fsSL", url, "-o", script], dry_run=dry_run)
        run_cmd(["/bin/bash", script], capture=False, dry_run=dry_run)


class Brew:
    """Thin wrapper over the brew CLI.

    Presence checks are read-only and run even in dry-run mode.
    """

    def __init__(self, executable: str = "brew", *, dry_run: bool = False) -> None:
        self.executable = executable
        self.dry_run = dry_run

    def is_installed(self, name: str, *, cask: bool = False) -> bool:
        argv = [self.executable, "list"]
        if cask:
            argv.append("--cask")
        argv.append(name)
        try:
            r = run_cmd(argv, check=False, quiet=True)
        except PrerequisiteMissing:
            # brew not installed yet (dry-run on a fresh machine)
            return False
        return r.ok

    def tap(self, tap: str) -> None:
        run_cmd([self.executable, "tap", tap], capture=False, dry_run=self.dry_run)

    def install(self, name: str, *, cask: bool = False) -> None:
        argv = [self.executable, "install"]
        if cask:
            argv.append("--cask")
        argv.append(name)
        run_cmd(argv, capture=False, dry_run=self.dry_run)

    def update(self) -> None:
        run_cmd([self.executable, "update"], capture=False, dry_run=self.dry_run)
