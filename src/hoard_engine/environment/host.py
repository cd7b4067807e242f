"""Snapshot of the host properties that environment facts are evaluated against."""

from __future__ import annotations

import os
import platform
import socket
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

# platform.system() -> identifier used in `os:` conditions
_OS_NAMES = {
    "linux": "linux",
    "darwin": "macos",
    "windows": "windows",
    "freebsd": "freebsd",
    "openbsd": "openbsd",
    "netbsd": "netbsd",
    "dragonfly": "dragonfly",
    "sunos": "solaris",
}


def current_os_name() -> str:
    """Return the running OS as ``linux``, ``macos``, ``windows``, ``freebsd``, ..."""
    system = platform.system().lower()
    return _OS_NAMES.get(system, system)


@dataclass(frozen=True)
class HostInfo:
    """Host state read once per run.

    Tests build this directly; the CLI uses ``HostInfo.current()``.
    """

    os_name: str
    hostname: str
    environ: Mapping[str, str] = field(default_factory=dict)
    search_path: str | None = None
    home: Path | None = None

    @classmethod
    def current(cls) -> HostInfo:
        environ = dict(os.environ)
        return cls(
            os_name=current_os_name(),
            hostname=socket.gethostname(),
            environ=environ,
            search_path=environ.get("PATH"),
            home=Path.home(),
        )
