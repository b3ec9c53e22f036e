# docportal/core/retention.py
"""Trash retention classification. Nothing here deletes; purge stays explicit."""
import math
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from ..schemas.document import Document, TrashItem
from ..utils.time import ensure_utc, utcnow

DEFAULT_RETENTION_DAYS = 30
DEFAULT_WARNING_DAYS = 7

_SECONDS_PER_DAY = 24 * 60 * 60


def days_remaining(deleted_at: datetime, retention_days: int = DEFAULT_RETENTION_DAYS,
                   now: Optional[datetime] = None) -> int:
    expiry = ensure_utc(deleted_at) + timedelta(days=retention_days)
    left = (expiry - ensure_utc(now or utcnow())).total_seconds() / _SECONDS_PER_DAY
    return max(0, math.ceil(left))


def is_purge_eligible(document: Document, retention_days: int = DEFAULT_RETENTION_DAYS,
                      now: Optional[datetime] = None) -> bool:
    if document.deleted_at is None:
        return False
    return days_remaining(document.deleted_at, retention_days, now) == 0


def trash_listing(documents: Iterable[Document], retention_days: int = DEFAULT_RETENTION_DAYS,
                  warning_days: int = DEFAULT_WARNING_DAYS,
                  now: Optional[datetime] = None) -> List[TrashItem]:
    now = now or utcnow()
    trashed = sorted(
        (d for d in documents if d.deleted_at is not None),
        key=lambda d: (d.deleted_at, d.id),
        reverse=True,
    )
    items = []
    for document in trashed:
        left = days_remaining(document.deleted_at, retention_days, now)
        items.append(TrashItem(
            document=document,
            days_remaining=left,
            purge_eligible=left == 0,
            expiring_soon=left <= warning_days,
        ))
    return items
