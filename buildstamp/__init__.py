"""Build-time version stamping.

`buildstamp-build` resolves a version string from git (with fallbacks) and
publishes it; `buildstamp` prints what was published.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
