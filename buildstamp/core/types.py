from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class VersionSource(str, Enum):
    """Which step of the fallback chain produced a version."""

    DESCRIBE = "describe"
    COMMIT = "commit"
    UNCOMMITTED = "uncommitted"
    PACKAGED = "packaged"
    UNKNOWN = "unknown"

    @property
    def from_vcs(self) -> bool:
        return self in (VersionSource.DESCRIBE, VersionSource.COMMIT, VersionSource.UNCOMMITTED)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Exit status and stdout of an external command.

    `returncode` is None when the command could not be started at all.
    """

    returncode: int | None
    stdout: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def text(self) -> str:
        return self.stdout.strip()


@dataclass(frozen=True, slots=True)
class VersionInfo:
    version: str
    build_date: str
    toolchain_version: str = ""
    source: VersionSource = VersionSource.UNKNOWN

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["source"] = self.source.value
        return out
