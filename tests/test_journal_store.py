"""Tests for the Journal Store: entries, mood check-ins, insights and persistence."""
from datetime import datetime, timedelta

import pytest

from core.errors import NotFoundError, ValidationError
from models.journal import InsightType
from services.journal_store import JournalStore

ANXIOUS_TEXT = "I'm anxious about work and worried about my decision"


class TestJournalEntries:
    """Manual entry CRUD."""

    def test_create_entry_defaults(self, journal_store, clock):
        entry = journal_store.create_entry("  Long day, but I made it.  ")
        assert entry.content == "Long day, but I made it."
        assert entry.title == "Journal Entry Oct 19, 2026"
        assert entry.timestamp == clock()
        assert entry.is_from_conversation is False
        assert journal_store.get_entry(entry.id) is entry

    def test_create_entry_with_fields(self, journal_store):
        entry = journal_store.create_entry(
            "Went for a walk", title="Evening", mood="7", tags=["walk", " walk ", ""],
            anxiety_level=3, gratitude="Fresh air",
        )
        assert entry.title == "Evening"
        assert entry.mood == 7
        assert entry.tags == ["walk"]
        assert entry.anxiety_level == 3
        assert entry.gratitude == "Fresh air"

    @pytest.mark.parametrize("content", ["", "   ", None])
    def test_content_required(self, journal_store, content):
        with pytest.raises(ValidationError):
            journal_store.create_entry(content)
        assert journal_store.entries == []

    @pytest.mark.parametrize("mood", [0, 11, 5.5, "high", True])
    def test_invalid_mood_rejected(self, journal_store, mood):
        with pytest.raises(ValidationError):
            journal_store.create_entry("text", mood=mood)

    def test_update_entry(self, journal_store, clock):
        entry = journal_store.create_entry("draft", tags=["sleep"])
        clock.advance(hours=1)

        updated = journal_store.update_entry(entry.id, content="final", mood=6, title=None)

        assert updated.content == "final"
        assert updated.mood == 6
        assert updated.title == entry.title
        assert updated.tags == ["sleep"]
        assert updated.updated_at == clock()
        assert journal_store.get_entry(entry.id) is updated

    def test_update_rejects_unknown_fields(self, journal_store):
        entry = journal_store.create_entry("draft")
        with pytest.raises(ValidationError):
            journal_store.update_entry(entry.id, is_from_conversation=True)

    def test_conversation_entries_are_read_only(self, journal_store, conversation_factory):
        entry = journal_store.create_entry_from_conversation(conversation_factory("hello"))
        with pytest.raises(ValidationError):
            journal_store.update_entry(entry.id, content="rewritten")

    def test_delete_entry(self, journal_store):
        entry = journal_store.create_entry("to delete")
        journal_store.delete_entry(entry.id)
        with pytest.raises(NotFoundError):
            journal_store.get_entry(entry.id)
        with pytest.raises(NotFoundError):
            journal_store.delete_entry(entry.id)


class TestListEntries:
    """Filtering, ordering and pagination."""

    @pytest.fixture
    def filled_store(self, journal_store, clock):
        for day in range(5):
            journal_store.create_entry(
                f"Day {day} notes", title=f"Day {day}", tags=["sleep"] if day % 2 else ["work"]
            )
            clock.advance(days=1)
        return journal_store

    def test_newest_first(self, filled_store):
        page = filled_store.list_entries()
        assert [e.title for e in page.entries] == ["Day 4", "Day 3", "Day 2", "Day 1", "Day 0"]
        assert page.total == 5

    def test_pagination(self, filled_store):
        page = filled_store.list_entries(page=2, limit=2)
        assert [e.title for e in page.entries] == ["Day 2", "Day 1"]
        assert page.total_pages == 3
        assert page.to_dict()["pagination"] == {"page": 2, "limit": 2, "total": 5, "totalPages": 3}

    def test_search_and_tags(self, filled_store):
        assert [e.title for e in filled_store.list_entries(search="DAY 3").entries] == ["Day 3"]
        assert [e.title for e in filled_store.list_entries(tags=["sleep"]).entries] == ["Day 3", "Day 1"]

    def test_date_range(self, filled_store, clock):
        start = clock() - timedelta(days=3)
        titles = [e.title for e in filled_store.list_entries(start_date=start).entries]
        assert titles == ["Day 4", "Day 3", "Day 2"]

    def test_invalid_page(self, filled_store):
        with pytest.raises(ValidationError):
            filled_store.list_entries(page=0)


class TestMoodEntries:
    """Mood check-ins are validated and append-only."""

    @pytest.mark.parametrize("mood", [1, 10])
    def test_bounds_accepted(self, journal_store, mood):
        assert journal_store.add_mood_entry(mood).mood == mood

    @pytest.mark.parametrize("mood", [11, 0, None, "ten"])
    def test_out_of_range_rejected(self, journal_store, mood):
        with pytest.raises(ValidationError):
            journal_store.add_mood_entry(mood)
        assert journal_store.mood_entries == []

    def test_lists_are_deduplicated(self, journal_store):
        entry = journal_store.add_mood_entry(
            4, emotions=["tired", "tired", "restless"], triggers=["deadline"], notes="rough"
        )
        assert entry.emotions == ("tired", "restless")
        assert entry.triggers == ("deadline",)
        assert entry.notes == "rough"

    def test_list_newest_first(self, journal_store, clock):
        journal_store.add_mood_entry(3)
        clock.advance(hours=2)
        journal_store.add_mood_entry(8)
        assert [m.mood for m in journal_store.list_mood_entries()] == [8, 3]


class TestConversationConversion:
    """Conversations become read-only journal entries."""

    def test_entry_from_conversation(self, journal_store, conversation_factory):
        conversation = conversation_factory(ANXIOUS_TEXT)
        entry = journal_store.create_entry_from_conversation(conversation)

        assert entry.is_from_conversation
        assert entry.conversation_id == conversation.id
        assert entry.timestamp == conversation.start_time
        assert entry.title == ANXIOUS_TEXT[:50] + "..."
        assert "anxiety" in entry.tags
        assert entry.message_count == 2
        assert entry.to_dict()["userMessageCount"] == 1

    def test_empty_conversation_rejected(self, journal_store, conversation_factory):
        with pytest.raises(ValidationError):
            journal_store.create_entry_from_conversation(conversation_factory())

    def test_recurring_anxiety_insight(self, journal_store, conversation_factory, clock):
        for day in range(3):
            conversation = conversation_factory(
                ANXIOUS_TEXT, start_time=datetime(2026, 10, 10 + day, 23, 0)
            )
            entry = journal_store.create_entry_from_conversation(conversation)
            assert "anxiety" in entry.tags
            clock.advance(days=1)

        matching = [i for i in journal_store.insights if i.title == "Recurring Anxiety Pattern Detected"]
        assert len(matching) == 1
        assert matching[0].frequency == 3
        assert matching[0].type == InsightType.PATTERN

    def test_insight_not_repeated(self, journal_store, conversation_factory):
        for _ in range(6):
            journal_store.create_entry_from_conversation(conversation_factory(ANXIOUS_TEXT))

        titles = [i.title for i in journal_store.insights]
        assert len(titles) == len(set(titles))

    def test_manual_entries_feed_insights(self, journal_store):
        for n in range(3):
            journal_store.create_entry(f"Pitch prep {n}", tags=["business"])
        assert [i.title for i in journal_store.insights] == ["Strong Business Focus"]


class TestInsights:
    def test_create_and_filter(self, journal_store, clock):
        journal_store.create_insight("trigger", "Late caffeine", "Coffee after 6pm keeps you up")
        clock.advance(minutes=1)
        journal_store.create_insight(InsightType.IMPROVEMENT, "Calmer nights", "Anxiety is trending down")

        assert [i.title for i in journal_store.list_insights()] == ["Calmer nights", "Late caffeine"]
        assert [i.title for i in journal_store.list_insights(type="trigger")] == ["Late caffeine"]

    def test_required_fields(self, journal_store):
        with pytest.raises(ValidationError):
            journal_store.create_insight("pattern", "", "description")
        with pytest.raises(ValidationError):
            journal_store.create_insight("hunch", "title", "description")

    def test_delete_insight(self, journal_store):
        insight = journal_store.create_insight("pattern", "t", "d")
        journal_store.delete_insight(insight.id)
        assert journal_store.insights == []
        with pytest.raises(NotFoundError):
            journal_store.delete_insight(insight.id)


class TestJournalPersistence:
    def test_round_trip(self, journal_store, storage, clock):
        entry = journal_store.create_entry("persist me", mood=6)
        journal_store.add_mood_entry(5, emotions=["calm"])
        journal_store.create_insight("achievement", "Consistency", "Five nights in a row")

        reloaded = JournalStore(storage=storage, clock=clock)

        assert reloaded.get_entry(entry.id).content == "persist me"
        assert reloaded.mood_entries[0].emotions == ("calm",)
        assert reloaded.insights[0].type == InsightType.ACHIEVEMENT

    def test_reset(self, journal_store, storage, backend, clock):
        journal_store.create_entry("gone soon")
        journal_store.reset()

        assert journal_store.entries == []
        assert backend.get("nightmind-journal") is None
        assert JournalStore(storage=storage, clock=clock).entries == []

    @pytest.mark.parametrize("payload", [["not", "a", "dict"], "text", 42])
    def test_unexpected_payload_starts_empty(self, storage, clock, payload):
        storage.set("nightmind-journal", payload)
        assert JournalStore(storage=storage, clock=clock).entries == []

    def test_stores_are_independent(self, journal_store, conversation_store, backend):
        conversation_store.create_conversation()
        conversation_store.add_message("hi")
        journal_store.create_entry("note")
        journal_store.reset()

        assert conversation_store.current_conversation is not None
        assert backend.get("nightmind-storage") is not None
