from __future__ import annotations

import platform
from typing import Any, Dict, Optional

MAC = "Mac"
LINUX = "Linux"
UNKNOWN_PREFIX = "UNKNOWN:"


def detect_platform(kernel_name: Optional[str] = None) -> str:
    """Map a kernel name (``uname -s``) to a platform tag.

    Anything that is neither Darwin nor Linux yields ``UNKNOWN:<raw>``.
    """

    kernel = platform.system() if kernel_name is None else kernel_name
    if kernel.startswith("Darwin"):
        return MAC
    if kernel.startswith("Linux"):
        return LINUX
    return f"{UNKNOWN_PREFIX}{kernel}"


def is_mac(tag: str) -> bool:
    return tag == MAC


def is_unknown(tag: str) -> bool:
    return tag.startswith(UNKNOWN_PREFIX)


def manifest_platform(tag: str) -> str:
    # Unknown kernels take the non-macOS path.
    return MAC if tag == MAC else LINUX


def normalize_arch(machine: str) -> str:
    m = machine.lower()
    return {
        "x86_64": "amd64",
        "amd64": "amd64",
        "aarch64": "arm64",
        "arm64": "arm64",
    }.get(m, m)


def detect_host(kernel_name: Optional[str] = None, machine: Optional[str] = None) -> Dict[str, Any]:
    kernel = platform.system() if kernel_name is None else kernel_name
    arch = normalize_arch(platform.machine() if machine is None else machine)
    return {
        "kernel": kernel,
        "tag": detect_platform(kernel),
        "arch": arch,
    }
