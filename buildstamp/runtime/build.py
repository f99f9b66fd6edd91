"""`buildstamp-build`: resolve the version once per build and publish it."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from buildstamp.config.errors import ConfigError
from buildstamp.config.loader import load_config
from buildstamp.config.model import STRATEGIES, BuildConfig, build_config_from_dict
from buildstamp.observability.logging import configure_logging
from buildstamp.version.publisher import (
    fragment_out_dir,
    publish_env,
    remove_stale_fragment,
    write_fragment,
)
from buildstamp.version.resolver import VersionResolver


logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildstamp-build",
        description="Resolve the build version and publish it for the buildstamp CLI",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        action="append",
        help="YAML config file; repeat to overlay (later files win)",
    )
    parser.add_argument(
        "--strategy",
        choices=list(STRATEGIES),
        help="fragment: write the constants module; env: emit a BUILD_VERSION directive",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        help="Directory for the generated module (the reporter reads $OUT_DIR or the package directory)",
    )
    parser.add_argument("--env-file", type=Path, help="Store the env directive in this dotenv file")
    parser.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Print the resolved version info as JSON and publish nothing",
    )
    return parser


def _load_build_config(paths: Sequence[Path] | None) -> BuildConfig:
    if not paths:
        return BuildConfig()
    return build_config_from_dict(load_config(list(paths)))


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    try:
        ns = parser.parse_args(argv)
    except SystemExit as e:
        # argparse has already printed help/usage.
        code = e.code
        return int(code) if isinstance(code, int) else 1

    configure_logging(level=ns.log_level)

    try:
        cfg = _load_build_config(ns.config)
        if ns.strategy is not None:
            cfg = replace(cfg, publisher=replace(cfg.publisher, strategy=ns.strategy))

        info = VersionResolver(config=cfg.resolver, toolchain=cfg.toolchain).resolve_info()
        logger.info("build_version_resolved", extra=info.to_dict())

        if ns.print_only:
            sys.stdout.write(json.dumps(info.to_dict(), ensure_ascii=False, indent=2))
            sys.stdout.write("\n")
            return 0

        out_dir = fragment_out_dir(cfg.publisher, out_dir=ns.out_dir)
        if cfg.publisher.strategy == "env":
            remove_stale_fragment(out_dir, name=cfg.publisher.fragment_name)
            publish_env(info, cfg.publisher, stream=sys.stdout, env_file=ns.env_file)
        else:
            write_fragment(info, out_dir, name=cfg.publisher.fragment_name)
        return 0

    except ConfigError as e:
        logger.error("config_error", extra={"error": str(e)})
        sys.stderr.write(f"ConfigError: {e}\n")
        return 2
    except Exception as e:  # noqa: BLE001
        logger.exception("fatal_error")
        sys.stderr.write(f"Fatal error: {e}\n")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
