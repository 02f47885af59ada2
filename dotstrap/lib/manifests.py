from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

MANIFEST_DIR = Path(__file__).resolve().parents[1] / "manifests"


def load_yaml(path: Path) -> Dict[str, Any]:
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyYAML required to load manifests") from e

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {path}")
    return data


def load_packages_manifest(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the package manifest (bundled one unless a path is given)."""
    return load_yaml(Path(path) if path else MANIFEST_DIR / "packages.yaml")


def load_instructions() -> Dict[str, Any]:
    return load_yaml(MANIFEST_DIR / "instructions.yaml")
