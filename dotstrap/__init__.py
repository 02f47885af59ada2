"""dotstrap: developer machine bootstrap (Homebrew + GNU Stow).

Core design goals:
- Idempotent steps (check presence, install if absent, else skip)
- Declarative package manifests
- Platform-aware decisions (macOS vs Linux)
- Centralized logging
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
