from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .lib.brew import HOMEBREW_INSTALL_URL
from .lib.stow import DEFAULT_BACKUP_PREFIX, DEFAULT_CONFLICT_FILES


@dataclass(frozen=True)
class BootstrapConfig:
    """Typed view over the raw ``state['config']`` mapping."""

    raw: Dict[str, Any]

    @property
    def dotfiles_dir(self) -> Path:
        return Path(str(self.raw.get("dotfiles_dir") or Path.cwd())).expanduser().resolve()

    @property
    def home(self) -> Path:
        return Path(str(self.raw.get("home") or Path.home())).expanduser()

    @property
    def dry_run(self) -> bool:
        return bool(self.raw.get("dry_run", False))

    @property
    def manifest(self) -> Optional[str]:
        value = self.raw.get("manifest")
        return str(value) if value else None

    @property
    def conflict_files(self) -> List[str]:
        value = self.raw.get("conflict_files")
        if value is None:
            return list(DEFAULT_CONFLICT_FILES)
        return [str(v) for v in value]

    @property
    def backup_prefix(self) -> str:
        return str(self.raw.get("backup_prefix") or DEFAULT_BACKUP_PREFIX)

    @property
    def homebrew_install_url(self) -> str:
        return str(self.raw.get("homebrew_install_url") or HOMEBREW_INSTALL_URL)

    @property
    def brew_update(self) -> bool:
        return bool(self.raw.get("brew_update", True))

    @property
    def linked_paths(self) -> Optional[List[str]]:
        value = self.raw.get("linked_paths")
        return [str(v) for v in value] if value is not None else None


def load_config_file(path: str) -> Dict[str, Any]:
    p = Path(path).expanduser()
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the config file") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a mapping/object")
    return raw


def merge_overrides(raw: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay CLI values on file values; None means 'not given'."""

    merged = dict(raw)
    for key, value in overrides.items():
        if value is not None:
            merged[key] = value
    return merged
