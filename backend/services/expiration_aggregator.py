"""Expiration aggregator - which sites, hosting accounts and mobile apps are coming up for renewal.

Pure functions only: callers fetch the owner's records and pass them in.
"""
from models import ExpiringItem, SourceType, UrgencyTier
from dataclasses import dataclass
from datetime import date, datetime, timedelta
import logging
import math
from typing import Optional, Dict, Any, Iterable, List, Mapping, Union

logger = logging.getLogger(__name__)

DEFAULT_LOOKAHEAD_DAYS = 30

# Tier upper bounds in days, most urgent first; a boundary belongs to the more urgent tier
URGENCY_THRESHOLDS = (
    (0, UrgencyTier.EXPIRED),
    (3, UrgencyTier.CRITICAL),
    (14, UrgencyTier.WARNING),
    (30, UrgencyTier.NOTICE),
)


@dataclass(frozen=True)
class SourceSpec:
    """Where a record kind keeps its id, display name and expiry date."""
    id_field: str
    name_field: str
    expiry_field: str


SOURCE_SPECS = {
    SourceType.SITE: SourceSpec("site_id", "name", "expiration_date"),
    SourceType.HOSTING: SourceSpec("hosting_account_id", "provider", "expiration_date"),
    SourceType.MOBILE_APP: SourceSpec("app_id", "app_name", "renewal_date"),
}


def parse_expiry_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Calendar date of a stored expiry value; None when the record has no expiry."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # ISO strings, with or without a time component
    return date.fromisoformat(str(value)[:10])


def days_until_expiry(expiry_date: date, as_of: Union[date, datetime]) -> int:
    if isinstance(as_of, datetime):
        delta = datetime.combine(expiry_date, datetime.min.time(), tzinfo=as_of.tzinfo) - as_of
        return math.ceil(delta.total_seconds() / 86400)
    return (expiry_date - as_of).days


def classify(days: int) -> Optional[UrgencyTier]:
    """Urgency tier for an item ``days`` away from expiry; None beyond one month."""
    for upper_bound, tier in URGENCY_THRESHOLDS:
        if days <= upper_bound:
            return tier
    return None


def aggregate(
    owner_id: Optional[str],
    as_of: Union[date, datetime],
    sources: Mapping[SourceType, Iterable[Dict[str, Any]]],
    lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS,
) -> List[ExpiringItem]:
    """Unified list of records whose expiry is on or before ``as_of + lookahead_days``.

    Already-expired records are included. Input order is kept within each
    source kind. Records with no expiry date, or one that is not an ISO
    date, are skipped.
    """
    items: List[ExpiringItem] = []
    for source_type, spec in SOURCE_SPECS.items():
        for record in sources.get(source_type) or []:
            try:
                expiry = parse_expiry_date(record.get(spec.expiry_field))
            except ValueError:
                logger.warning(
                    f"Skipping {source_type.value} {record.get(spec.id_field)}: "
                    f"unreadable {spec.expiry_field} {record.get(spec.expiry_field)!r}"
                )
                continue
            if expiry is None:
                continue
            days = days_until_expiry(expiry, as_of)
            if days > lookahead_days:
                continue
            items.append(ExpiringItem(
                id=str(record.get(spec.id_field)),
                owner_id=owner_id,
                source_type=source_type,
                display_name=record.get(spec.name_field) or "",
                expiry_date=expiry.isoformat(),
                days_until_expiry=days,
                urgency=classify(days),
            ))
    return items


def lookahead_horizon(as_of: Union[date, datetime], lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS) -> date:
    """Last calendar day covered by the window, for the store-side range query."""
    start = as_of.date() if isinstance(as_of, datetime) else as_of
    return start + timedelta(days=lookahead_days)
