"""Amount formatting and the weekly deadline calculations."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def _load_zone() -> tzinfo:
    try:
        return ZoneInfo("America/Sao_Paulo")
    except ZoneInfoNotFoundError:
        # Without tz data fall back to the zone's fixed offset.
        return timezone(timedelta(hours=-3), "America/Sao_Paulo")


SAO_PAULO = _load_zone()


def format_amount(amount: int) -> str:
    """Shorten an amount: millions become ``kk``, thousands ``k``."""
    if amount < 0:
        raise ValueError(f"amount must not be negative: {amount}")
    if amount >= 1_000_000:
        return f"{amount // 1_000_000}kk"
    if amount >= 1_000:
        return f"{amount // 1_000}k"
    return str(amount)


def _local_now(now: datetime | None) -> datetime:
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(SAO_PAULO)


def _at_18(moment: datetime) -> datetime:
    return moment.replace(hour=18, minute=0, second=0, microsecond=0)


def get_next_monday_at_18(now: datetime | None = None) -> datetime:
    """Return the coming Monday at 18:00 in São Paulo; on a Monday, the next one."""
    local = _local_now(now)
    days_until_monday = 7 - local.weekday()
    return _at_18(local + timedelta(days=days_until_monday))


def get_last_monday_at_18(now: datetime | None = None) -> datetime:
    """Return the Monday 18:00 in São Paulo that opened the current week."""
    local = _local_now(now)
    if local.weekday() == 0 and local.hour < 18:
        return _at_18(local - timedelta(days=7))
    return _at_18(local - timedelta(days=local.weekday()))