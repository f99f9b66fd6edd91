"""Best-effort version resolution.

Fallback chain, first present result wins:

1. `git describe --tags --always --dirty`
2. short commit hash, plus `-dirty` when the work tree has changes
3. `uncommitted` inside a work tree that has no commits yet
4. an override environment variable (tarball builds)
5. `unknown`
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Mapping

from buildstamp.config.model import ResolverConfig, ToolchainConfig
from buildstamp.core.clock import build_timestamp
from buildstamp.core.process import CommandRunner, run_command
from buildstamp.core.types import VersionInfo, VersionSource
from buildstamp.vcs.git import GitClient


logger = logging.getLogger(__name__)

DIRTY_SUFFIX = "-dirty"
UNCOMMITTED = "uncommitted"
UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class Resolution:
    version: str
    source: VersionSource


@dataclass
class VersionResolver:
    config: ResolverConfig = field(default_factory=ResolverConfig)
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)
    runner: CommandRunner = run_command
    environ: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        self._git = GitClient(command=self.config.vcs_command, cwd=self.config.cwd, runner=self.runner)

    # -- chain steps --------------------------------------------------------

    def describe_version(self) -> str | None:
        return self._git.describe(abbrev=self.config.abbrev)

    def commit_version(self) -> str | None:
        commit = self._git.short_hash(abbrev=self.config.abbrev)
        if commit is None:
            return None
        return f"{commit}{DIRTY_SUFFIX}" if self._git.is_dirty() else commit

    def uncommitted_version(self) -> str | None:
        return UNCOMMITTED if self._git.is_inside_work_tree() else None

    def packaged_version(self) -> str | None:
        env = os.environ if self.environ is None else self.environ
        value = (env.get(self.config.override_env) or "").strip()
        return value or None

    def _steps(self) -> list[tuple[VersionSource, Callable[[], str | None]]]:
        return [
            (VersionSource.DESCRIBE, self.describe_version),
            (VersionSource.COMMIT, self.commit_version),
            (VersionSource.UNCOMMITTED, self.uncommitted_version),
            (VersionSource.PACKAGED, self.packaged_version),
        ]

    def resolve(self) -> Resolution:
        for source, step in self._steps():
            version = step()
            if version:
                logger.debug("version_resolved", extra={"source": source.value, "version": version})
                return Resolution(version=version, source=source)
            logger.debug("version_step_empty", extra={"source": source.value})
        return Resolution(version=UNKNOWN, source=VersionSource.UNKNOWN)

    # -- side lookups -------------------------------------------------------

    def toolchain_version(self) -> str:
        """Compiler identification, or "" when the toolchain cannot be queried."""

        result = self.runner(list(self.toolchain.command), cwd=None)
        return result.text if result.ok else ""

    def resolve_info(self, *, now: datetime | None = None) -> VersionInfo:
        resolution = self.resolve()
        return VersionInfo(
            version=resolution.version,
            build_date=build_timestamp(now),
            toolchain_version=self.toolchain_version(),
            source=resolution.source,
        )


def resolve_version_info(
    config: ResolverConfig | None = None,
    toolchain: ToolchainConfig | None = None,
) -> VersionInfo:
    resolver = VersionResolver(
        config=config or ResolverConfig(),
        toolchain=toolchain or ToolchainConfig(),
    )
    return resolver.resolve_info()
