"""Journal-side entities: entries, mood check-ins, insights and dashboard stats."""
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from models.session import new_id, to_iso, from_iso


class InsightType(Enum):
    PATTERN = "pattern"
    TRIGGER = "trigger"
    IMPROVEMENT = "improvement"
    ACHIEVEMENT = "achievement"


@dataclass
class JournalEntry:
    """A manual or conversation-derived journal entry."""
    title: str
    content: str
    id: str = field(default_factory=new_id)
    mood: Optional[int] = None              # 1-10
    tags: List[str] = field(default_factory=list)
    anxiety_level: Optional[int] = None     # 1-10
    gratitude: Optional[str] = None
    goals: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    # Only set for entries converted from a conversation
    is_from_conversation: bool = False
    conversation_id: Optional[str] = None
    message_count: Optional[int] = None
    user_message_count: Optional[int] = None
    assistant_message_count: Optional[int] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "mood": self.mood,
            "tags": list(self.tags),
            "anxietyLevel": self.anxiety_level,
            "gratitude": self.gratitude,
            "goals": self.goals,
            "timestamp": to_iso(self.timestamp),
            "updatedAt": to_iso(self.updated_at),
            "isFromConversation": self.is_from_conversation,
        }
        if self.is_from_conversation:
            data.update({
                "conversationId": self.conversation_id,
                "messageCount": self.message_count,
                "userMessageCount": self.user_message_count,
                "assistantMessageCount": self.assistant_message_count,
            })
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "JournalEntry":
        return cls(
            id=data["id"],
            title=data["title"],
            content=data["content"],
            mood=data.get("mood"),
            tags=list(data.get("tags", [])),
            anxiety_level=data.get("anxietyLevel"),
            gratitude=data.get("gratitude"),
            goals=data.get("goals"),
            timestamp=from_iso(data["timestamp"]),
            updated_at=from_iso(data.get("updatedAt")) or from_iso(data["timestamp"]),
            is_from_conversation=bool(data.get("isFromConversation", False)),
            conversation_id=data.get("conversationId"),
            message_count=data.get("messageCount"),
            user_message_count=data.get("userMessageCount"),
            assistant_message_count=data.get("assistantMessageCount"),
        )


@dataclass(frozen=True)
class MoodEntry:
    """An explicit mood check-in. Never updated."""
    mood: int
    id: str = field(default_factory=new_id)
    emotions: tuple = ()
    triggers: tuple = ()
    physical_symptoms: tuple = ()
    notes: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "mood": self.mood,
            "emotions": list(self.emotions),
            "triggers": list(self.triggers),
            "physicalSymptoms": list(self.physical_symptoms),
            "notes": self.notes,
            "timestamp": to_iso(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MoodEntry":
        return cls(
            id=data["id"],
            mood=int(data["mood"]),
            emotions=tuple(data.get("emotions", [])),
            triggers=tuple(data.get("triggers", [])),
            physical_symptoms=tuple(data.get("physicalSymptoms", [])),
            notes=data.get("notes"),
            timestamp=from_iso(data["timestamp"]),
        )


@dataclass(frozen=True)
class Insight:
    """A derived observation about recurring journal themes."""
    type: InsightType
    title: str
    description: str
    id: str = field(default_factory=new_id)
    frequency: int = 1
    actionable: Optional[str] = None
    last_occurrence: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "frequency": self.frequency,
            "actionable": self.actionable,
            "lastOccurrence": to_iso(self.last_occurrence),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Insight":
        return cls(
            id=data["id"],
            type=InsightType(data["type"]),
            title=data["title"],
            description=data["description"],
            frequency=int(data.get("frequency", 1)),
            actionable=data.get("actionable"),
            last_occurrence=from_iso(data["lastOccurrence"]),
        )


@dataclass
class EntryPage:
    """One page of a filtered journal listing."""
    entries: List[JournalEntry]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0

    def to_dict(self) -> dict:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "totalPages": self.total_pages,
            },
        }


@dataclass
class JournalStats:
    """Dashboard numbers, recomputed on every query."""
    total_entries: int = 0
    conversation_entries: int = 0
    manual_entries: int = 0
    total_mood_entries: int = 0
    average_mood: float = 0
    top_tags: List[Dict[str, Any]] = field(default_factory=list)     # [{"tag", "count"}]
    mood_by_date: List[Dict[str, Any]] = field(default_factory=list)  # [{"date", "averageMood"}]
    insights: int = 0

    def to_dict(self) -> dict:
        return {
            "totalEntries": self.total_entries,
            "conversationEntries": self.conversation_entries,
            "manualEntries": self.manual_entries,
            "totalMoodEntries": self.total_mood_entries,
            "averageMood": self.average_mood,
            "topTags": [dict(t) for t in self.top_tags],
            "moodByDate": [dict(d) for d in self.mood_by_date],
            "insights": self.insights,
        }
