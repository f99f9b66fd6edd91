from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml
from dotenv import load_dotenv

from buildstamp.config.errors import ConfigError


_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


class _EnvExpander:
    """Substitutes ${NAME} in string values and collects what could not be resolved."""

    def __init__(self, environ: Mapping[str, str]):
        self._environ = environ
        self.problems: list[str] = []

    def expand(self, value: Any, where: str) -> Any:
        if isinstance(value, str):
            return _ENV_REF.sub(lambda m: self._lookup(m, where), value)
        if isinstance(value, Mapping):
            return {str(k): self.expand(v, f"{where}.{k}" if where else str(k)) for k, v in value.items()}
        if isinstance(value, list):
            return [self.expand(v, f"{where}[{i}]") for i, v in enumerate(value)]
        return value

    def _lookup(self, match: re.Match[str], where: str) -> str:
        name = match.group(1)
        value = self._environ.get(name)
        if not value:
            state = "missing" if value is None else "empty"
            self.problems.append(f"- {name} ({state}) at {where or '<root>'}")
            return match.group(0)
        return value


def _overlay(base: dict[str, Any], top: Mapping[str, Any]) -> dict[str, Any]:
    """Nested mappings merge key by key; everything else in `top` wins."""

    out = dict(base)
    for key, value in top.items():
        current = out.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            out[key] = _overlay(dict(current), value)
        else:
            out[key] = value
    return out


def _read_mapping(path: Path) -> Mapping[str, Any]:
    if not path.is_file():
        raise ConfigError("Config file not found", path=str(path))
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read YAML config: {e}", path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError("Top-level YAML must be a mapping/dict", path=str(path))
    return data


def load_config(
    paths: Path | Sequence[Path],
    *,
    load_dotenv_file: bool = True,
    dotenv_path: Path | None = None,
) -> dict[str, Any]:
    """Read build config files and expand ${ENV_VAR} references.

    Files are overlaid in order. A `.env` file (default: the working directory's)
    is loaded first without overriding variables that are already set.

    Raises:
        ConfigError: on a missing or malformed file, or any missing/empty variable.
    """

    files = [paths] if isinstance(paths, Path) else list(paths)
    if not files:
        raise ConfigError("No config files provided")

    if load_dotenv_file:
        load_dotenv(dotenv_path or Path.cwd() / ".env", override=False)

    merged: dict[str, Any] = {}
    for path in files:
        merged = _overlay(merged, _read_mapping(path))

    expander = _EnvExpander(os.environ)
    expanded = expander.expand(merged, "")
    if expander.problems:
        sources = ", ".join(str(p) for p in files)
        raise ConfigError("\n".join([f"Unresolved environment variables in config ({sources}):", *expander.problems]))

    return expanded
