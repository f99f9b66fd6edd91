from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable, Sequence

from buildstamp.core.types import CommandResult


logger = logging.getLogger(__name__)

# Signature shared by run_command and the fakes used in tests.
CommandRunner = Callable[..., CommandResult]


def run_command(args: Sequence[str], *, cwd: str | Path | None = None) -> CommandResult:
    """Run a command synchronously and capture its exit status and stdout.

    Never raises for the expected failure modes: a missing executable yields
    `returncode=None`, undecodable output yields an empty stdout with the real
    exit status. stderr is discarded. There is no timeout.
    """

    argv = [str(a) for a in args]
    try:
        completed = subprocess.run(
            argv,
            cwd=str(cwd) if cwd is not None else None,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError as e:
        logger.debug("command_unavailable", extra={"argv": argv, "error": str(e)})
        return CommandResult(returncode=None)

    try:
        stdout = completed.stdout.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("command_output_unreadable", extra={"argv": argv})
        stdout = ""

    logger.debug(
        "command_finished",
        extra={"argv": argv, "returncode": completed.returncode, "stdout_bytes": len(completed.stdout)},
    )
    return CommandResult(returncode=completed.returncode, stdout=stdout)
