from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def save_report(path: str, state: Dict[str, Any]) -> None:
    """Write the final run state as JSON or YAML (by extension)."""

    p = Path(path).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) in {"yaml", "yml"}:
        try:
            import yaml  # type: ignore
        except Exception as e:  # pragma: no cover
            raise RuntimeError("YAML report requested but PyYAML is not available.") from e
        p.write_text(yaml.safe_dump(state, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    logger.info("Run report written to %s", p)


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with defaults (without overriding caller values)."""

    state.setdefault("config", {})
    state.setdefault("platform", {})
    state.setdefault("execution", {})

    exe = state["execution"]
    exe.setdefault("current_step", None)
    exe.setdefault("completed_steps", [])
    exe.setdefault("installed", [])
    exe.setdefault("skipped", [])
    exe.setdefault("errors", [])

    return state


def _already_tracked(exe: Dict[str, Any], name: str) -> bool:
    return name in (exe.get("installed") or []) or name in (exe.get("skipped") or [])


def record_installed(state: Dict[str, Any], name: str) -> None:
    exe = state.setdefault("execution", {})
    if not _already_tracked(exe, name):
        exe.setdefault("installed", []).append(name)


def record_skipped(state: Dict[str, Any], name: str) -> None:
    exe = state.setdefault("execution", {})
    if not _already_tracked(exe, name):
        exe.setdefault("skipped", []).append(name)


def tracked(state: Dict[str, Any]) -> Tuple[List[str], List[str]]:
    exe = state.get("execution") or {}
    return list(exe.get("installed") or []), list(exe.get("skipped") or [])


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)
