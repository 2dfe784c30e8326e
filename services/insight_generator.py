"""Insight Generator

Runs after every new journal entry and turns recurring tags into Insight
records. Rules are keyed by (type, marker): a rule stays silent once any
insight title contains its marker, so the generator never emits the same
title twice.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Sequence

from models.journal import Insight, InsightType, JournalEntry

logger = logging.getLogger(__name__)

# Overlapping entries (excluding the new one) needed before any rule runs
MIN_OVERLAPPING_ENTRIES = 2


@dataclass(frozen=True)
class ThemeRule:
    """Emit one insight when enough entries carry a tag."""
    tag: str
    min_entries: int
    type: InsightType
    title: str
    marker: str
    description: str  # formatted with {count}
    actionable: str

    def build(self, count: int, now: datetime) -> Insight:
        return Insight(
            type=self.type,
            title=self.title,
            description=self.description.format(count=count),
            frequency=count,
            actionable=self.actionable,
            last_occurrence=now,
        )


THEME_RULES = [
    ThemeRule(
        tag="anxiety",
        min_entries=3,
        type=InsightType.PATTERN,
        title="Recurring Anxiety Pattern Detected",
        marker="Anxiety Pattern",
        description=(
            "You've had {count} conversations about anxiety-related topics. "
            "Consider exploring these patterns during calmer moments."
        ),
        actionable='Try scheduling dedicated "worry time" during the day to process concerns before bedtime.',
    ),
    ThemeRule(
        tag="business",
        min_entries=3,
        type=InsightType.ACHIEVEMENT,
        title="Strong Business Focus",
        marker="Business Focus",
        description=(
            "You've had {count} conversations about business strategy and growth. "
            "Your dedication to strategic thinking is evident."
        ),
        actionable="Consider documenting these insights in a separate business strategy document.",
    ),
]


class InsightGenerator:
    """Scans the journal for recurring themes."""

    def __init__(self, rules: Sequence[ThemeRule] = THEME_RULES,
                 clock: Callable[[], datetime] = datetime.now):
        self.rules = list(rules)
        self._clock = clock

    def overlapping_entries(self, entry: JournalEntry, entries: Sequence[JournalEntry]) -> List[JournalEntry]:
        """Other entries sharing at least one tag with entry."""
        tags = set(entry.tags)
        return [e for e in entries if e.id != entry.id and tags.intersection(e.tags)]

    def generate(self, entry: JournalEntry, entries: Sequence[JournalEntry],
                 insights: Sequence[Insight]) -> List[Insight]:
        """
        Insights to append after entry was added to entries.

        Args:
            entry: The entry that was just appended.
            entries: The whole journal, including entry.
            insights: Insights that already exist.

        Returns:
            New insights (possibly empty); the caller stores them.
        """
        if len(self.overlapping_entries(entry, entries)) < MIN_OVERLAPPING_ENTRIES:
            return []

        titles = [i.title for i in insights]
        created: List[Insight] = []
        for rule in self.rules:
            count = sum(1 for e in entries if rule.tag in e.tags)
            if count < rule.min_entries:
                continue
            if any(rule.marker in title for title in titles) or rule.title in titles:
                continue

            insight = rule.build(count, self._clock())
            created.append(insight)
            titles.append(insight.title)
            logger.info(f"Insight generated: '{insight.title}' (frequency {count})")

        return created
