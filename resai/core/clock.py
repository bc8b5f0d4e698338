from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Naive UTC timestamp, comparable with values read back from the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def usage_period(moment: datetime | None = None) -> str:
    return (moment or utc_now()).strftime("%Y-%m")
