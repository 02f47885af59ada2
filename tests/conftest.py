from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

import pytest

from dotstrap.errors import CommandError
from dotstrap.lib.command import CmdResult

PATCHED_MODULES = (
    "dotstrap.lib.brew",
    "dotstrap.lib.git",
    "dotstrap.lib.download",
    "dotstrap.lib.stow",
    "dotstrap.steps.step_10_prerequisites",
)


class FakeHost:
    """Stands in for brew/git/curl/stow/xcode-select at the run_cmd boundary."""

    def __init__(self) -> None:
        self.formulae: set[str] = set()
        self.casks: set[str] = set()
        self.calls: List[List[str]] = []
        self.xcode_installed = True
        self.stow: Optional[Callable[[List[str], Optional[str]], CmdResult]] = None

    def installs(self) -> List[List[str]]:
        return [c for c in self.calls if c[1:2] == ["install"]]

    def _dispatch(self, argv: List[str], cwd: Optional[str]) -> CmdResult:
        tool = Path(argv[0]).name
        rc = 0
        if tool == "brew":
            sub = argv[1]
            cask = "--cask" in argv
            name = argv[-1]
            if sub == "list":
                rc = 0 if name in (self.casks if cask else self.formulae) else 1
            elif sub == "install":
                (self.casks if cask else self.formulae).add(name.split("/")[-1])
        elif tool == "git":
            Path(argv[-1]).mkdir(parents=True)
        elif tool == "curl":
            dest = Path(argv[argv.index("-o") + 1])
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(b"font")
        elif tool == "stow":
            if self.stow is not None:
                return self.stow(argv, cwd)
        elif tool == "xcode-select":
            rc = 0 if self.xcode_installed or argv[1] != "-p" else 2
        return CmdResult(argv=argv, returncode=rc, stdout="", stderr="")

    def run_cmd(self, argv, *, check=True, cwd=None, capture=True, dry_run=False, quiet=False):
        argv = list(argv)
        self.calls.append(argv)
        if dry_run:
            return CmdResult(argv=argv, returncode=0, stdout="", stderr="")
        r = self._dispatch(argv, cwd)
        if check and r.returncode != 0:
            raise CommandError(argv, r.returncode, r.stderr)
        return r


@pytest.fixture
def fake_host(monkeypatch) -> FakeHost:
    host = FakeHost()
    for mod in PATCHED_MODULES:
        monkeypatch.setattr(f"{mod}.run_cmd", host.run_cmd)
    return host


@pytest.fixture
def home(tmp_path) -> Path:
    p = tmp_path / "home"
    p.mkdir()
    return p


@pytest.fixture
def dotfiles(tmp_path) -> Path:
    p = tmp_path / "dotfiles"
    p.mkdir()
    (p / ".zshrc").write_text("# managed\n")
    return p
