import uuid
from typing import Dict, List, Any, Iterable, Optional
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Sender(Enum):
    USER = "user"
    ASSISTANT = "assistant"


class CommunicationStyle(Enum):
    EMPATHETIC = "empathetic"
    DIRECT = "direct"
    ANALYTICAL = "analytical"


class MessageMood(Enum):
    """Optional mood the user attaches to a message."""
    ANXIOUS = "anxious"
    CALM = "calm"
    CONFUSED = "confused"
    HOPEFUL = "hopeful"
    STRESSED = "stressed"
    RELAXED = "relaxed"


class ConversationMood(Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


def new_id() -> str:
    return str(uuid.uuid4())


def to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def from_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def merge_unique(*groups: Iterable[str]) -> List[str]:
    """Union of tag groups, first occurrence wins the position."""
    merged: List[str] = []
    for group in groups:
        for item in group or ():
            if item not in merged:
                merged.append(item)
    return merged


@dataclass
class UserProfile:
    """Long-term memory: who the user is and how they like to be spoken to."""
    id: str = field(default_factory=new_id)
    name: str = ""
    preferred_communication_style: CommunicationStyle = CommunicationStyle.EMPATHETIC
    triggers: List[str] = field(default_factory=list)
    coping_strategies: List[str] = field(default_factory=list)
    goals: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "preferredCommunicationStyle": self.preferred_communication_style.value,
            "triggers": list(self.triggers),
            "copingStrategies": list(self.coping_strategies),
            "goals": list(self.goals),
            "createdAt": to_iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserProfile":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            preferred_communication_style=CommunicationStyle(
                data.get("preferredCommunicationStyle", CommunicationStyle.EMPATHETIC.value)
            ),
            triggers=list(data.get("triggers", [])),
            coping_strategies=list(data.get("copingStrategies", [])),
            goals=list(data.get("goals", [])),
            created_at=from_iso(data.get("createdAt")) or datetime.now(),
        )


@dataclass(frozen=True)
class Message:
    """A single chat message. Owned by its Conversation, never edited."""
    content: str
    sender: Sender
    id: str = field(default_factory=new_id)
    timestamp: datetime = field(default_factory=datetime.now)
    mood: Optional[MessageMood] = None
    tags: tuple = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "sender": self.sender.value,
            "timestamp": to_iso(self.timestamp),
            "mood": self.mood.value if self.mood else None,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Message":
        return cls(
            id=data["id"],
            content=data["content"],
            sender=Sender(data["sender"]),
            timestamp=from_iso(data["timestamp"]),
            mood=MessageMood(data["mood"]) if data.get("mood") else None,
            tags=tuple(data.get("tags", [])),
        )


@dataclass
class Conversation:
    """One chat session. Active until end_time is stamped, then immutable."""
    title: str
    id: str = field(default_factory=new_id)
    messages: List[Message] = field(default_factory=list)
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    anxiety_level_before: Optional[int] = None
    anxiety_level_after: Optional[int] = None
    tags: List[str] = field(default_factory=list)
    summary: Optional[str] = None
    mood: Optional[ConversationMood] = None

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    @property
    def user_messages(self) -> List[Message]:
        return [m for m in self.messages if m.sender == Sender.USER]

    @property
    def assistant_messages(self) -> List[Message]:
        return [m for m in self.messages if m.sender == Sender.ASSISTANT]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "messages": [m.to_dict() for m in self.messages],
            "startTime": to_iso(self.start_time),
            "endTime": to_iso(self.end_time),
            "anxietyLevelBefore": self.anxiety_level_before,
            "anxietyLevelAfter": self.anxiety_level_after,
            "tags": list(self.tags),
            "summary": self.summary,
            "mood": self.mood.value if self.mood else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Conversation":
        return cls(
            id=data["id"],
            title=data["title"],
            messages=[Message.from_dict(m) for m in data.get("messages", [])],
            start_time=from_iso(data["startTime"]),
            end_time=from_iso(data.get("endTime")),
            anxiety_level_before=data.get("anxietyLevelBefore"),
            anxiety_level_after=data.get("anxietyLevelAfter"),
            tags=list(data.get("tags", [])),
            summary=data.get("summary"),
            mood=ConversationMood(data["mood"]) if data.get("mood") else None,
        )


@dataclass
class CompletionResult:
    """What the Completion Service returns for one user turn."""
    content: str
    tags: List[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class AnalysisResult:
    """What the Analysis Service returns for a finished conversation."""
    summary: str
    mood: ConversationMood
    tags: List[str] = field(default_factory=list)


@dataclass
class TurnResult:
    """Outcome of add_message: the messages appended plus an optional warning."""
    conversation: Conversation
    messages: List[Message] = field(default_factory=list)
    warning: Optional[str] = None

    @property
    def reply(self) -> Optional[Message]:
        return self.messages[-1] if self.messages else None


@dataclass
class EndResult:
    """Outcome of end_conversation."""
    conversation: Conversation
    warning: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"conversation": self.conversation.to_dict(), "warning": self.warning}
