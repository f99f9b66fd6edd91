"""`buildstamp`: print the version information baked in at build time."""

from __future__ import annotations

import importlib
import importlib.util
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Mapping, Sequence, TextIO


FRAGMENT_MODULE = "buildstamp._build_version"
FRAGMENT_NAME = "_build_version.py"
OUT_DIR_ENV = "OUT_DIR"
BUILD_VERSION_ENV = "BUILD_VERSION"
UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class BuildConstants:
    version: str
    build_date: str = ""
    toolchain_version: str = ""
    # Composite string when only the inline constant was published.
    banner: str | None = None


def _load_fragment_file(path: Path) -> ModuleType | None:
    if not path.is_file():
        return None
    spec = importlib.util.spec_from_file_location("_buildstamp_fragment", path)
    if spec is None or spec.loader is None:
        return None
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


def _import_fragment(module_name: str) -> ModuleType | None:
    try:
        return importlib.import_module(module_name)
    except ImportError:
        return None


def load_build_constants(
    *,
    module_name: str = FRAGMENT_MODULE,
    environ: Mapping[str, str] | None = None,
) -> BuildConstants:
    """Look up the constants published by `buildstamp-build`.

    Order: `$OUT_DIR/_build_version.py`, the fragment inside the package,
    the baked `BUILD_VERSION` constant, then `unknown`.
    """

    env = os.environ if environ is None else environ

    mod = None
    out_dir = env.get(OUT_DIR_ENV)
    if out_dir:
        mod = _load_fragment_file(Path(out_dir) / FRAGMENT_NAME)
    if mod is None:
        mod = _import_fragment(module_name)

    if mod is not None:
        return BuildConstants(
            version=str(getattr(mod, "VERSION", "") or UNKNOWN),
            build_date=str(getattr(mod, "BUILD_DATE", "")),
            toolchain_version=str(getattr(mod, "TOOLCHAIN_VERSION", "")),
        )

    composite = env.get(BUILD_VERSION_ENV, "").strip()
    if composite:
        return BuildConstants(version=composite, banner=composite)

    return BuildConstants(version=UNKNOWN)


def program_name(argv0: str | None = None) -> str:
    if argv0 is None:
        argv0 = sys.argv[0] if sys.argv else ""
    name = Path(argv0).name if argv0 else ""
    return name or UNKNOWN


def render(args: Sequence[str], constants: BuildConstants, *, prog: str) -> str:
    first = args[0] if args else None
    if first == "--version":
        return constants.version
    if first == "--build-date":
        return constants.build_date
    if first == "--build-toolchain":
        return constants.toolchain_version

    if constants.banner is not None:
        return f"{prog} {constants.banner}"
    return f"{prog} {constants.version} ({constants.build_date}) [{constants.toolchain_version}]"


def main(argv: Sequence[str] | None = None, *, stdout: TextIO | None = None) -> int:
    """Console entrypoint. Unrecognized arguments fall through to the banner."""

    args = list(argv) if argv is not None else sys.argv[1:]
    out = stdout or sys.stdout
    out.write(render(args, load_build_constants(), prog=program_name()) + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
