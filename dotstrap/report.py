from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .lib.hostinfo import manifest_platform

RULE = "=" * 51


def section_header(title: str) -> List[str]:
    return ["", RULE, title, RULE, ""]


def render_summary(installed: Sequence[str], skipped: Sequence[str]) -> List[str]:
    lines = ["Installation Complete!", ""]
    if installed:
        lines.append(f"Newly Installed ({len(installed)}):")
        lines.extend(f"  + {name}" for name in installed)
        lines.append("")
    if skipped:
        lines.append(f"Skipped (already installed) ({len(skipped)}):")
        lines.extend(f"  - {name}" for name in skipped)
        lines.append("")
    return lines


def render_linked_paths(paths: Sequence[str]) -> List[str]:
    if not paths:
        return []
    return ["The following files/directories are now symlinked:"] + [f"  - {p}" for p in paths]


def render_instructions(platform: str, dotfiles_dir: str, instructions: Dict[str, Any]) -> List[str]:
    """Numbered post-install steps: shared steps first, then the platform's own."""

    per_platform = (instructions.get("platforms") or {}).get(manifest_platform(platform)) or {}
    steps = list(instructions.get("shared") or []) + list(per_platform.get("steps") or [])

    lines = [f"{per_platform.get('heading') or 'Manual steps required'}:", ""]
    for n, step in enumerate(steps, start=1):
        lines.append(f"{n}. {step.get('title')}:")
        lines.extend(f"   {line}" for line in step.get("lines") or [])
        lines.append("")

    lines.append("Enjoy your new development environment!")
    lines.append("")
    lines.append("Note: Your dotfiles have been symlinked, not copied.")
    lines.append(f"Any changes you make to files in {dotfiles_dir} will be reflected immediately.")
    return lines
