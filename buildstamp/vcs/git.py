"""Thin wrapper over the handful of git commands the resolver needs.

Every method returns None (or False) on any failure; callers treat that as
"no result" and move on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from buildstamp.core.process import CommandRunner, run_command


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitClient:
    command: str = "git"
    cwd: str | Path | None = None
    runner: CommandRunner = run_command

    def _output(self, *args: str) -> str | None:
        result = self.runner([self.command, *args], cwd=self.cwd)
        if not result.ok:
            return None
        return result.text or None

    def describe(self, *, abbrev: int) -> str | None:
        """`git describe --tags --always --dirty --abbrev=N`."""

        return self._output("describe", "--tags", "--always", "--dirty", f"--abbrev={abbrev}")

    def short_hash(self, *, abbrev: int) -> str | None:
        return self._output("rev-parse", f"--short={abbrev}", "HEAD")

    def is_dirty(self) -> bool:
        # A failing status command counts as clean.
        result = self.runner([self.command, "status", "--porcelain"], cwd=self.cwd)
        return result.ok and bool(result.text)

    def is_inside_work_tree(self) -> bool:
        return self._output("rev-parse", "--is-inside-work-tree") == "true"
