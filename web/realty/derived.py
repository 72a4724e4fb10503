"""Read-side derivations computed from stored fields, never persisted on their own."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

import pytz

logger = logging.getLogger(__name__)

_OFFSET_RE = re.compile(r"^UTC([+-])(\d{2}):(\d{2})$")


def parse_timezone(timezone_str: Optional[str]):
    """Return a pytz timezone for an IANA name or a ``UTC+HH:MM`` offset.

    Unknown values fall back to UTC.
    """
    if timezone_str:
        try:
            return pytz.timezone(timezone_str)
        except pytz.exceptions.UnknownTimeZoneError:
            pass

        match = _OFFSET_RE.match(timezone_str)
        if match:
            sign, hours, minutes = match.groups()
            total_offset = int(hours) * 60 + int(minutes)
            if sign == "-":
                total_offset = -total_offset
            return pytz.FixedOffset(total_offset)

        logger.warning("Could not parse timezone %r, using UTC", timezone_str)
    return pytz.UTC


def full_address(address: Optional[Mapping[str, Any]]) -> str:
    """``street, city, state zip`` with missing parts dropped."""
    if not address:
        return ""
    street = address.get("street") or ""
    city = address.get("city") or ""
    state_zip = " ".join(p for p in (address.get("state"), address.get("zip_code")) if p)
    return ", ".join(p for p in (street, city, state_zip) if p)


def is_open_now(
    office_hours: Optional[Iterable[Mapping[str, Any]]],
    timezone_str: Optional[str] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Whether the office is open at *now* (UTC, defaults to the current time)
    in the office's own timezone. Hours are ``HH:MM`` strings, close exclusive."""
    tz = parse_timezone(timezone_str)
    moment = now or datetime.utcnow()
    if moment.tzinfo is None:
        moment = pytz.UTC.localize(moment)
    local = moment.astimezone(tz)

    day_name = local.strftime("%A")
    today = next((h for h in office_hours or [] if h.get("day") == day_name), None)
    if not today or today.get("closed") or not today.get("open") or not today.get("close"):
        return False

    current = local.strftime("%H:%M")
    return today["open"] <= current < today["close"]


def current_status(office: Any, now: Optional[datetime] = None) -> str:
    if not office.is_active:
        return "closed"
    timezone_str = (office.settings or {}).get("timezone")
    return "open" if is_open_now(office.office_hours, timezone_str, now) else "closed"


def compute_statistics(
    total_agents: int,
    active_listings: int,
    sold_properties: Iterable[Any],
    previous: Optional[Mapping[str, Any]] = None,
) -> dict:
    """Office statistics from membership and listings.

    ``sold_properties`` are this year's sales; each needs ``price``,
    ``created_at`` and ``sold_at``.
    """
    sold = list(sold_properties)
    total_volume = sum((Decimal(str(p.price)) for p in sold), Decimal("0"))
    days = [
        (p.sold_at - p.created_at).days
        for p in sold
        if p.sold_at is not None and p.created_at is not None
    ]
    stats = dict(previous or {})
    stats.update({
        "total_agents": total_agents,
        "active_listings": active_listings,
        "sold_this_year": len(sold),
        "total_volume": float(total_volume),
        "average_days_on_market": round(sum(days) / len(days)) if days else 0,
    })
    return stats
