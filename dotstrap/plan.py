"""Manifest items, presence planning and plan execution.

Planning is pure given a presence probe: it only sorts items into
``to_install`` and ``already_present``. Execution performs the installs and
records every item name in exactly one of the installed/skipped lists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .lib.brew import Brew
from .lib.download import download_file
from .lib.git import clone, repo_present
from .lib.hostinfo import LINUX, MAC
from .state_store import record_installed, record_skipped

logger = logging.getLogger(__name__)

KINDS = ("brew", "git", "download")
PLATFORMS = (MAC, LINUX)


def parse_platforms(value: Any, *, where: str) -> Tuple[str, ...]:
    """Normalize a manifest `platforms` value; a bare string is one platform."""

    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ValueError(f"Manifest {where}: platforms must be a list")
    for p in value:
        if p not in PLATFORMS:
            raise ValueError(f"Manifest {where}: unknown platform {p!r} (expected one of {', '.join(PLATFORMS)})")
    return tuple(value)


@dataclass(frozen=True)
class Item:
    name: str
    kind: str = "brew"
    cask: bool = False
    tap: Optional[str] = None
    install_name: Optional[str] = None
    url: Optional[str] = None
    dest: Optional[str] = None
    platforms: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Item":
        name = str(raw.get("name") or "").strip()
        if not name:
            raise ValueError(f"Manifest item without a name: {raw}")
        kind = str(raw.get("kind") or "brew")
        if kind not in KINDS:
            raise ValueError(f"Manifest item {name}: unknown kind {kind!r}")
        if kind in {"git", "download"} and not (raw.get("url") and raw.get("dest")):
            raise ValueError(f"Manifest item {name}: {kind} items need url and dest")
        return cls(
            name=name,
            kind=kind,
            cask=bool(raw.get("cask", False)),
            tap=raw.get("tap"),
            install_name=raw.get("install_name"),
            url=raw.get("url"),
            dest=raw.get("dest"),
            platforms=parse_platforms(raw.get("platforms"), where=f"item {name}"),
        )

    def applies_to(self, platform: str) -> bool:
        return not self.platforms or platform in self.platforms


@dataclass(frozen=True)
class Section:
    id: str
    title: str
    items: Tuple[Item, ...]
    platforms: Tuple[str, ...] = ()

    def applies_to(self, platform: str) -> bool:
        return not self.platforms or platform in self.platforms


def parse_sections(manifest: Dict[str, Any]) -> List[Section]:
    sections = manifest.get("sections") or []
    if not isinstance(sections, list):
        raise ValueError("packages manifest: sections must be a list")

    out: List[Section] = []
    for raw in sections:
        items = raw.get("items") or []
        if not isinstance(items, list):
            raise ValueError(f"Section {raw.get('id')} items must be a list")
        out.append(
            Section(
                id=str(raw.get("id") or ""),
                title=str(raw.get("title") or raw.get("id") or ""),
                items=tuple(Item.from_dict(i) for i in items),
                platforms=parse_platforms(raw.get("platforms"), where=f"section {raw.get('id')}"),
            )
        )
    return out


def expand_home(path: str, home: Path) -> Path:
    if path == "~":
        return home
    if path.startswith("~/"):
        return home / path[2:]
    return Path(path)


@dataclass(frozen=True)
class Plan:
    to_install: List[Item]
    already_present: List[Item]


def plan_items(items: Iterable[Item], probe: Callable[[Item], bool]) -> Plan:
    to_install: List[Item] = []
    present: List[Item] = []
    for item in items:
        (present if probe(item) else to_install).append(item)
    return Plan(to_install=to_install, already_present=present)


class Installer:
    """Presence checks and install actions per item kind."""

    def __init__(self, brew: Brew, *, home: Path, dry_run: bool = False) -> None:
        self.brew = brew
        self.home = home
        self.dry_run = dry_run

    def is_present(self, item: Item) -> bool:
        if item.kind == "brew":
            return self.brew.is_installed(item.name, cask=item.cask)
        dest = expand_home(str(item.dest), self.home)
        if item.kind == "git":
            return repo_present(dest)
        return dest.exists()

    def install(self, item: Item) -> None:
        if item.kind == "brew":
            if item.tap:
                self.brew.tap(item.tap)
            self.brew.install(item.install_name or item.name, cask=item.cask)
        elif item.kind == "git":
            clone(str(item.url), expand_home(str(item.dest), self.home), dry_run=self.dry_run)
        else:
            download_file(str(item.url), expand_home(str(item.dest), self.home), dry_run=self.dry_run)


def execute_plan(plan: Plan, installer: Installer, state: Dict[str, Any]) -> None:
    for item in plan.already_present:
        logger.warning("%s is already installed (skipping)", item.name)
        record_skipped(state, item.name)

    for item in plan.to_install:
        logger.info("Installing %s...", item.name)
        installer.install(item)
        record_installed(state, item.name)
        logger.info("%s installed", item.name)
