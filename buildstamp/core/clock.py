from __future__ import annotations

from datetime import datetime, timezone

BUILD_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def build_timestamp(now: datetime | None = None) -> str:
    """UTC build time as `YYYY-MM-DDTHH:MM:SSZ`.

    A naive `now` is taken to be UTC already.
    """

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime(BUILD_DATE_FORMAT)
