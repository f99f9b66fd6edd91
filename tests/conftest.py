from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Sequence

import pytest

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from buildstamp.core.types import CommandResult  # noqa: E402


class FakeRunner:
    """Offline stand-in for run_command keyed on argv tuples.

    Unscripted commands behave like a missing tool.
    """

    def __init__(self, responses: dict[tuple[str, ...], CommandResult] | None = None):
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, ...]] = []

    def __call__(self, args: Sequence[str], *, cwd: object = None) -> CommandResult:
        key = tuple(args)
        self.calls.append(key)
        return self.responses.get(key, CommandResult(returncode=None))


@pytest.fixture
def make_runner():
    return FakeRunner


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """buildstamp-build reconfigures the root logger; undo it after each test."""

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
