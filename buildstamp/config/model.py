from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Mapping

from buildstamp.config.errors import ConfigError


STRATEGIES = ("fragment", "env")


def _default_toolchain_command() -> tuple[str, ...]:
    return (sys.executable or "python3", "--version")


@dataclass(frozen=True)
class ResolverConfig:
    vcs_command: str = "git"
    abbrev: int = 10
    # Consulted only when no git work tree is present (tarball builds).
    override_env: str = "BUILDSTAMP_PACKAGE_VERSION"
    cwd: str | None = None


@dataclass(frozen=True)
class ToolchainConfig:
    command: tuple[str, ...] = field(default_factory=_default_toolchain_command)


@dataclass(frozen=True)
class PublisherConfig:
    strategy: str = "fragment"
    base_version: str | None = None
    env_name: str = "BUILD_VERSION"
    env_file: str | None = None
    out_dir_env: str = "OUT_DIR"
    fragment_name: str = "_build_version.py"


@dataclass(frozen=True)
class BuildConfig:
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)
    publisher: PublisherConfig = field(default_factory=PublisherConfig)


def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError("must be a mapping", path=key)
    return value


def _opt_str(d: Mapping[str, Any], key: str, *, path: str) -> str | None:
    value = d.get(key)
    if value is None:
        return None
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise ConfigError("must be a string", path=f"{path}.{key}")
    return str(value)


def _name(d: Mapping[str, Any], key: str, default: str, *, path: str) -> str:
    value = _opt_str(d, key, path=path)
    if value is None:
        return default
    if not value.strip():
        raise ConfigError("must be a non-empty string", path=f"{path}.{key}")
    return value.strip()


def build_config_from_dict(raw: Mapping[str, Any]) -> BuildConfig:
    """Validate an expanded config mapping into a BuildConfig.

    Missing sections and keys fall back to defaults.
    """

    res_raw = _section(raw, "resolver")
    abbrev_raw = res_raw.get("abbrev", ResolverConfig.abbrev)
    try:
        abbrev = int(abbrev_raw)
    except (TypeError, ValueError) as e:
        raise ConfigError("must be an integer", path="resolver.abbrev") from e
    if isinstance(abbrev_raw, bool) or abbrev < 1:
        raise ConfigError("must be an integer >= 1", path="resolver.abbrev")

    resolver = ResolverConfig(
        vcs_command=_name(res_raw, "vcs_command", ResolverConfig.vcs_command, path="resolver"),
        abbrev=abbrev,
        override_env=_name(res_raw, "override_env", ResolverConfig.override_env, path="resolver"),
        cwd=_opt_str(res_raw, "cwd", path="resolver"),
    )

    tc_raw = _section(raw, "toolchain")
    toolchain = ToolchainConfig()
    if tc_raw.get("command") is not None:
        cmd = tc_raw["command"]
        if isinstance(cmd, str):
            cmd = cmd.split()
        if not isinstance(cmd, list) or not cmd or not all(isinstance(x, str) and x for x in cmd):
            raise ConfigError("must be a non-empty list of strings", path="toolchain.command")
        toolchain = ToolchainConfig(command=tuple(cmd))

    pub_raw = _section(raw, "publisher")
    strategy = _name(pub_raw, "strategy", PublisherConfig.strategy, path="publisher")
    if strategy not in STRATEGIES:
        raise ConfigError(f"unsupported strategy {strategy!r}; expected one of {STRATEGIES}", path="publisher.strategy")

    fragment_name = _name(pub_raw, "fragment_name", PublisherConfig.fragment_name, path="publisher")
    if not fragment_name.endswith(".py") or "/" in fragment_name or "\\" in fragment_name:
        raise ConfigError("must be a plain *.py file name", path="publisher.fragment_name")

    publisher = PublisherConfig(
        strategy=strategy,
        base_version=_opt_str(pub_raw, "base_version", path="publisher"),
        env_name=_name(pub_raw, "env_name", PublisherConfig.env_name, path="publisher"),
        env_file=_opt_str(pub_raw, "env_file", path="publisher"),
        out_dir_env=_name(pub_raw, "out_dir_env", PublisherConfig.out_dir_env, path="publisher"),
        fragment_name=fragment_name,
    )

    return BuildConfig(resolver=resolver, toolchain=toolchain, publisher=publisher)
