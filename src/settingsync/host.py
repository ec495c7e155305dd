from __future__ import annotations

import platform
import sys
from dataclasses import dataclass


@dataclass(frozen=True)
class HostPlatform:
    """Facts about the running host that gate some settings."""

    is_macos: bool = False
    is_arm64: bool = False

    @classmethod
    def detect(cls) -> HostPlatform:
        machine = platform.machine().lower()
        return cls(
            is_macos=sys.platform == "darwin",
            is_arm64=machine in {"arm64", "aarch64"},
        )


__all__ = ["HostPlatform"]
