"""Publish a resolved VersionInfo for the running program.

Two strategies:

- inline constant: one composite string emitted as a `NAME="value"` directive
  (or stored into a dotenv file) for the build system to bake into the
  program's environment;
- structured constants: a generated Python module with `VERSION`,
  `TOOLCHAIN_VERSION` and `BUILD_DATE`, imported by the reporter.

A failed write is a warning, never a failed build.
"""

from __future__ import annotations

import logging
import os
from importlib import metadata
from pathlib import Path
from typing import Mapping, TextIO

from dotenv import set_key

from buildstamp import __version__
from buildstamp.config.model import PublisherConfig
from buildstamp.core.types import VersionInfo


logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent.parent

FRAGMENT_HEADER = "# Generated by buildstamp-build. Do not edit.\n"


def installed_version(dist: str = "buildstamp") -> str:
    try:
        return metadata.version(dist)
    except metadata.PackageNotFoundError:
        return __version__


def format_composite(info: VersionInfo, *, base_version: str) -> str:
    """`<base> (<vcs-descriptor> <build-date>) <toolchain>`.

    The descriptor appears only for versions that came from git; the toolchain
    part only when it is non-empty.
    """

    out = f"{base_version} ("
    if info.source.from_vcs:
        out += f"{info.version} "
    out += f"{info.build_date})"
    if info.toolchain_version:
        out += f" {info.toolchain_version}"
    return out


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def format_env_directive(name: str, value: str) -> str:
    return f"{name}={_quote(value)}"


def render_fragment(info: VersionInfo) -> str:
    return (
        FRAGMENT_HEADER
        + f"VERSION = {info.version!r}\n"
        + f"TOOLCHAIN_VERSION = {info.toolchain_version!r}\n"
        + f"BUILD_DATE = {info.build_date!r}\n"
    )


def fragment_out_dir(
    config: PublisherConfig,
    *,
    out_dir: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Explicit directory, then `$OUT_DIR`, then the package directory."""

    if out_dir is not None:
        return Path(out_dir)
    env = os.environ if environ is None else environ
    from_env = env.get(config.out_dir_env)
    if from_env:
        return Path(from_env)
    return PACKAGE_DIR


def write_fragment(info: VersionInfo, out_dir: Path, *, name: str = "_build_version.py") -> Path | None:
    """Write the constants module. Returns its path, or None if the write failed."""

    path = out_dir / name
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(render_fragment(info), encoding="utf-8")
    except OSError as e:
        logger.warning("fragment_write_failed", extra={"path": str(path), "error": str(e)})
        return None

    logger.info("fragment_written", extra={"path": str(path), "version": info.version})
    return path


def publish_env(
    info: VersionInfo,
    config: PublisherConfig,
    *,
    stream: TextIO,
    env_file: str | Path | None = None,
) -> str | None:
    """Emit the composite constant.

    With an env file the value is stored there; otherwise the directive line is
    written to `stream`. Returns the composite, or None if the env file write failed.
    """

    composite = format_composite(info, base_version=config.base_version or installed_version())
    target = env_file if env_file is not None else config.env_file

    if target is None:
        stream.write(format_env_directive(config.env_name, composite) + "\n")
        return composite

    path = Path(target)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
        set_key(str(path), config.env_name, composite, quote_mode="always")
    except OSError as e:
        logger.warning("env_file_write_failed", extra={"path": str(path), "error": str(e)})
        return None

    logger.info("env_file_written", extra={"path": str(path), "env_name": config.env_name})
    return composite


def remove_stale_fragment(out_dir: Path, *, name: str = "_build_version.py") -> bool:
    """Delete a fragment left by an earlier build.

    The reporter prefers a fragment over `BUILD_VERSION`, so switching to the
    inline strategy has to clear it. Returns True if a file was removed.
    """

    path = out_dir / name
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning("stale_fragment_remove_failed", extra={"path": str(path), "error": str(e)})
        return False

    logger.info("stale_fragment_removed", extra={"path": str(path)})
    return True
