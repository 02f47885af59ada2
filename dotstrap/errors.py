from __future__ import annotations

from typing import Sequence


class BootstrapError(RuntimeError):
    """Fatal bootstrap failure. The CLI exits non-zero on any subclass."""


class PrerequisiteMissing(BootstrapError):
    pass


class CommandError(BootstrapError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if stderr.strip():
            msg += f"\n{stderr.strip()}"
        super().__init__(msg)


class LinkError(BootstrapError):
    def __init__(self, message: str, *, backup_dir: str | None = None) -> None:
        self.backup_dir = backup_dir
        super().__init__(message)
