"""Journal Store

Owns journal entries, mood check-ins and insights. Independent of the
conversation store: conversations come in only through
create_entry_from_conversation, and nothing flows back.

Every mutation is written through the encrypted store before returning.
"""
import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from config.settings import DEFAULT_PAGE_SIZE, JOURNAL_STORAGE_KEY
from core.errors import NotFoundError, ValidationError
from models.journal import EntryPage, Insight, InsightType, JournalEntry, JournalStats, MoodEntry
from models.session import Conversation, merge_unique
from services.insight_generator import InsightGenerator
from services.journal_stats import compute_journal_stats, filter_by_date
from services.persistence import EncryptedStore
from tools.text_signals import digest_conversation

logger = logging.getLogger(__name__)

SCALE_MIN = 1
SCALE_MAX = 10

EDITABLE_FIELDS = {"title", "content", "mood", "tags", "anxiety_level", "gratitude", "goals"}


def validate_scale(value, field_name: str, label: str, required: bool = False) -> Optional[int]:
    """Coerce a 1-10 rating to int or raise ValidationError."""
    if value is None:
        if required:
            raise ValidationError(f"{label} must be a number between 1 and 10", field=field_name)
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a number between 1 and 10", field=field_name)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number between 1 and 10", field=field_name) from None
    if not number.is_integer() or not SCALE_MIN <= number <= SCALE_MAX:
        raise ValidationError(f"{label} must be a number between 1 and 10", field=field_name)
    return int(number)


def clean_list(values: Optional[Iterable[str]]) -> List[str]:
    """Strip, drop blanks and duplicates."""
    return merge_unique([v.strip() for v in values or () if v and v.strip()])


class JournalStore:
    """CRUD over journal entries, append-only mood entries and insights."""

    def __init__(self, storage: Optional[EncryptedStore] = None,
                 insight_generator: Optional[InsightGenerator] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self._storage = storage
        self._clock = clock
        self.insight_generator = insight_generator or InsightGenerator(clock=clock)

        self.entries: List[JournalEntry] = []
        self.mood_entries: List[MoodEntry] = []
        self.insights: List[Insight] = []

        if storage is not None:
            self._load()

    # === Journal entries ===

    def create_entry(self, content: str, title: Optional[str] = None, mood=None,
                     tags: Optional[Iterable[str]] = None, anxiety_level=None,
                     gratitude: Optional[str] = None, goals: Optional[str] = None) -> JournalEntry:
        """Create a manual journal entry."""
        if not content or not content.strip():
            raise ValidationError("Content is required", field="content")

        now = self._clock()
        entry = JournalEntry(
            title=(title or "").strip() or f"Journal Entry {now:%b %d, %Y}",
            content=content.strip(),
            mood=validate_scale(mood, "mood", "Mood"),
            tags=clean_list(tags),
            anxiety_level=validate_scale(anxiety_level, "anxiety_level", "Anxiety level"),
            gratitude=gratitude or None,
            goals=goals or None,
            timestamp=now,
            updated_at=now,
        )
        return self._append_entry(entry)

    def create_entry_from_conversation(self, conversation: Conversation) -> JournalEntry:
        """Convert a conversation into a journal entry (one-way)."""
        if conversation is None or not conversation.messages:
            raise ValidationError("Valid conversation with messages is required", field="conversation")

        digest = digest_conversation(conversation)
        entry = JournalEntry(
            title=digest.title,
            content=digest.content,
            mood=digest.mood,
            tags=digest.tags,
            anxiety_level=digest.anxiety_level,
            timestamp=conversation.start_time,
            updated_at=self._clock(),
            is_from_conversation=True,
            conversation_id=conversation.id,
            message_count=digest.message_count,
            user_message_count=digest.user_message_count,
            assistant_message_count=digest.assistant_message_count,
        )
        logger.info(f"Converted conversation {conversation.id} into journal entry (tags: {digest.tags})")
        return self._append_entry(entry)

    def get_entry(self, entry_id: str) -> JournalEntry:
        return self.entries[self._index_of(entry_id)]

    def list_entries(self, search: Optional[str] = None, tags: Optional[Iterable[str]] = None,
                     start_date: Optional[datetime] = None, end_date: Optional[datetime] = None,
                     page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> EntryPage:
        """Filtered, newest-first, paginated listing."""
        if page < 1 or limit < 1:
            raise ValidationError("Page and limit must be positive")

        results = list(self.entries)
        if search:
            needle = search.lower()
            results = [e for e in results if needle in e.title.lower() or needle in e.content.lower()]
        if tags:
            wanted = set(tags)
            results = [e for e in results if wanted.intersection(e.tags)]
        results = filter_by_date(results, start_date, end_date, self._clock())
        results.sort(key=lambda e: e.timestamp, reverse=True)

        start = (page - 1) * limit
        return EntryPage(entries=results[start:start + limit], page=page, limit=limit, total=len(results))

    def update_entry(self, entry_id: str, **changes) -> JournalEntry:
        """Edit a manual entry. Fields left out (or None) keep their value."""
        index = self._index_of(entry_id)
        entry = self.entries[index]
        if entry.is_from_conversation:
            raise ValidationError("Entries created from a conversation cannot be edited")

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        updates = {k: v for k, v in changes.items() if v is not None}
        if "content" in updates:
            if not updates["content"].strip():
                raise ValidationError("Content is required", field="content")
            updates["content"] = updates["content"].strip()
        if "title" in updates and not updates["title"].strip():
            del updates["title"]
        if "mood" in updates:
            updates["mood"] = validate_scale(updates["mood"], "mood", "Mood")
        if "anxiety_level" in updates:
            updates["anxiety_level"] = validate_scale(updates["anxiety_level"], "anxiety_level", "Anxiety level")
        if "tags" in updates:
            updates["tags"] = clean_list(updates["tags"])

        updated = replace(entry, updated_at=self._clock(), **updates)
        self.entries[index] = updated
        self._persist()
        return updated

    def delete_entry(self, entry_id: str):
        """Permanently delete an entry; its source conversation is untouched."""
        entry = self.entries.pop(self._index_of(entry_id))
        self._persist()
        logger.info(f"Deleted journal entry {entry.id}")

    def _append_entry(self, entry: JournalEntry) -> JournalEntry:
        self.entries.append(entry)
        new_insights = self.insight_generator.generate(entry, self.entries, self.insights)
        self.insights.extend(new_insights)
        self._persist()
        return entry

    def _index_of(self, entry_id: str) -> int:
        for index, entry in enumerate(self.entries):
            if entry.id == entry_id:
                return index
        raise NotFoundError("Journal entry", entry_id)

    # === Mood entries ===

    def add_mood_entry(self, mood, emotions: Iterable[str] = (), triggers: Iterable[str] = (),
                       physical_symptoms: Iterable[str] = (), notes: Optional[str] = None) -> MoodEntry:
        """Record a mood check-in (1-10)."""
        entry = MoodEntry(
            mood=validate_scale(mood, "mood", "Mood", required=True),
            emotions=tuple(clean_list(emotions)),
            triggers=tuple(clean_list(triggers)),
            physical_symptoms=tuple(clean_list(physical_symptoms)),
            notes=notes or None,
            timestamp=self._clock(),
        )
        self.mood_entries.append(entry)
        self._persist()
        return entry

    def list_mood_entries(self, start_date: Optional[datetime] = None,
                          end_date: Optional[datetime] = None) -> List[MoodEntry]:
        results = filter_by_date(self.mood_entries, start_date, end_date, self._clock())
        return sorted(results, key=lambda e: e.timestamp, reverse=True)

    # === Insights ===

    def create_insight(self, type, title: str, description: str, frequency: int = 1,
                       actionable: Optional[str] = None) -> Insight:
        """Manual insight creation with the generator's shape."""
        if not type or not title or not description:
            raise ValidationError("Type, title, and description are required")
        insight_type = self._insight_type(type)
        try:
            frequency = int(frequency)
        except (TypeError, ValueError):
            raise ValidationError("Frequency must be a whole number", field="frequency") from None

        insight = Insight(
            type=insight_type,
            title=title,
            description=description,
            frequency=frequency,
            actionable=actionable or None,
            last_occurrence=self._clock(),
        )
        self.insights.append(insight)
        self._persist()
        return insight

    def list_insights(self, type=None) -> List[Insight]:
        results = list(self.insights)
        if type:
            wanted = self._insight_type(type)
            results = [i for i in results if i.type == wanted]
        return sorted(results, key=lambda i: i.last_occurrence, reverse=True)

    @staticmethod
    def _insight_type(value) -> InsightType:
        if isinstance(value, InsightType):
            return value
        try:
            return InsightType(value)
        except ValueError:
            raise ValidationError(f"Unknown insight type '{value}'", field="type") from None

    def delete_insight(self, insight_id: str):
        for index, insight in enumerate(self.insights):
            if insight.id == insight_id:
                del self.insights[index]
                self._persist()
                return
        raise NotFoundError("Insight", insight_id)

    # === Stats & reset ===

    def get_stats(self, start_date: Optional[datetime] = None,
                  end_date: Optional[datetime] = None) -> JournalStats:
        return compute_journal_stats(
            self.entries, self.mood_entries, len(self.insights),
            start_date=start_date, end_date=end_date, now=self._clock(),
        )

    def reset(self):
        """Drop every entry, mood check-in and insight."""
        self.entries = []
        self.mood_entries = []
        self.insights = []
        if self._storage is not None:
            self._storage.remove(JOURNAL_STORAGE_KEY)
        logger.info("Journal store reset")

    # === Persistence ===

    def to_dict(self) -> dict:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "moodEntries": [m.to_dict() for m in self.mood_entries],
            "insights": [i.to_dict() for i in self.insights],
        }

    def _persist(self):
        if self._storage is not None:
            self._storage.set(JOURNAL_STORAGE_KEY, self.to_dict())

    def _load(self):
        data = self._storage.get(JOURNAL_STORAGE_KEY)
        if not data:
            logger.info("No saved journal, starting fresh")
            return
        try:
            self.entries = [JournalEntry.from_dict(e) for e in data.get("entries", [])]
            self.mood_entries = [MoodEntry.from_dict(m) for m in data.get("moodEntries", [])]
            self.insights = [Insight.from_dict(i) for i in data.get("insights", [])]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Saved journal is malformed, starting fresh: {e!r}")
            self.entries, self.mood_entries, self.insights = [], [], []
            return
        logger.info(
            f"Loaded {len(self.entries)} entries, {len(self.mood_entries)} mood entries, "
            f"{len(self.insights)} insights"
        )
