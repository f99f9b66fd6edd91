"""Build-step configuration.

- Optional YAML files, deep-merged in order
- Strict ${ENV_VAR} expansion (missing/empty env vars are errors)
- Defaults for everything, so no file is required
"""

from __future__ import annotations

from buildstamp.config.errors import BuildstampError, ConfigError
from buildstamp.config.loader import load_config
from buildstamp.config.model import (
    BuildConfig,
    PublisherConfig,
    ResolverConfig,
    ToolchainConfig,
    build_config_from_dict,
)

__all__ = [
    "BuildConfig",
    "BuildstampError",
    "ConfigError",
    "PublisherConfig",
    "ResolverConfig",
    "ToolchainConfig",
    "build_config_from_dict",
    "load_config",
]
