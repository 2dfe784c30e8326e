"""Statistics Aggregator

Pure, read-only dashboard numbers computed from the journal on every query.
"""
from collections import Counter, OrderedDict
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, TypeVar

from models.journal import JournalEntry, JournalStats, MoodEntry

TOP_TAG_LIMIT = 5
MOOD_TREND_DAYS = 7

T = TypeVar("T")


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive local time; convert offset-aware bounds to match."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def filter_by_date(items: Iterable[T], start_date: Optional[datetime] = None,
                   end_date: Optional[datetime] = None, now: Optional[datetime] = None) -> List[T]:
    """
    Keep items whose timestamp falls inside [start_date, end_date].

    With no bounds everything is kept. With one bound, a missing start means
    "since forever" and a missing end means "until now".
    """
    items = list(items)
    if start_date is None and end_date is None:
        return items
    start = to_local_naive(start_date) or datetime.min
    end = to_local_naive(end_date) or now or datetime.now()
    return [item for item in items if start <= item.timestamp <= end]


def top_tags(entries: Iterable[JournalEntry], limit: int = TOP_TAG_LIMIT) -> List[dict]:
    """Most frequent tags; ties go to the tag seen in the most recent entry."""
    newest_first = sorted(entries, key=lambda e: e.timestamp, reverse=True)
    counts = Counter(tag for entry in newest_first for tag in entry.tags)
    return [{"tag": tag, "count": count} for tag, count in counts.most_common(limit)]


def mood_trend(mood_entries: Iterable[MoodEntry], days: int = MOOD_TREND_DAYS) -> List[dict]:
    """Mean mood per local calendar day, the most recent days in chronological order."""
    buckets = OrderedDict()
    for entry in sorted(mood_entries, key=lambda e: e.timestamp):
        buckets.setdefault(entry.timestamp.date().isoformat(), []).append(entry.mood)

    trend = [
        {"date": day, "averageMood": sum(moods) / len(moods)}
        for day, moods in buckets.items()
    ]
    return trend[-days:]


def average_mood(mood_entries: Sequence[MoodEntry]) -> float:
    if not mood_entries:
        return 0
    return round(sum(e.mood for e in mood_entries) / len(mood_entries), 1)


def compute_journal_stats(entries: Iterable[JournalEntry], mood_entries: Iterable[MoodEntry],
                          insight_count: int, start_date: Optional[datetime] = None,
                          end_date: Optional[datetime] = None,
                          now: Optional[datetime] = None) -> JournalStats:
    """Aggregate journal and mood data; the insight count is never date-filtered."""
    entries = filter_by_date(entries, start_date, end_date, now)
    mood_entries = filter_by_date(mood_entries, start_date, end_date, now)

    from_conversation = sum(1 for e in entries if e.is_from_conversation)

    return JournalStats(
        total_entries=len(entries),
        conversation_entries=from_conversation,
        manual_entries=len(entries) - from_conversation,
        total_mood_entries=len(mood_entries),
        average_mood=average_mood(mood_entries),
        top_tags=top_tags(entries),
        mood_by_date=mood_trend(mood_entries),
        insights=insight_count,
    )
