# docportal/core/analytics.py
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Iterable, Optional

from ..schemas.analytics import AnalyticsSummary, SubjectDownloads, TopDocument
from ..schemas.document import Document
from ..utils.time import ensure_utc, utcnow

UNCATEGORISED_SUBJECT = "Other"


def period_starts(now: datetime):
    """Start of today, of the week (Sunday) and of the month, in UTC"""
    day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    # weekday(): Monday == 0, so Sunday is (weekday + 1) % 7 days back
    week = day - timedelta(days=(day.weekday() + 1) % 7)
    month = day.replace(day=1)
    return day, week, month


def summarize(documents: Iterable[Document], downloaded_at: Iterable[datetime],
              now: Optional[datetime] = None, top: int = 5) -> AnalyticsSummary:
    now = ensure_utc(now or utcnow())
    active = [d for d in documents if d.deleted_at is None]

    ranked = sorted(active, key=lambda d: (-d.downloads, d.name.casefold(), d.id))
    by_subject = defaultdict(int)
    for d in active:
        by_subject[d.subject or UNCATEGORISED_SUBJECT] += d.downloads

    day, week, month = period_starts(now)
    today = this_week = this_month = 0
    for stamp in downloaded_at:
        stamp = ensure_utc(stamp)
        if stamp >= month:
            this_month += 1
        if stamp >= week:
            this_week += 1
        if stamp >= day:
            today += 1

    return AnalyticsSummary(
        total_downloads=sum(d.downloads for d in active),
        today=today,
        this_week=this_week,
        this_month=this_month,
        top_documents=[
            TopDocument(id=d.id, name=d.name, downloads=d.downloads) for d in ranked[:top]
        ],
        by_subject=[
            SubjectDownloads(subject=subject, downloads=count)
            for subject, count in sorted(by_subject.items(), key=lambda kv: (-kv[1], kv[0]))
        ],
    )
