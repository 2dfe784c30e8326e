"""Deterministic text signals: topic tags, conversation mood and journal digests.

No stemming, no tokenization: everything is lower-cased substring search over
fixed vocabularies, so the same text always yields the same result.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from models.session import Conversation, ConversationMood, Message, merge_unique

# Topic vocabulary used for message and conversation tags
TOPIC_KEYWORDS = [
    "anxiety",
    "stress",
    "work",
    "sleep",
    "relationship",
    "family",
    "health",
    "decision",
    "future",
    "money",
    "career",
    "self-doubt",
    "confidence",
    "fear",
    "anger",
    "sadness",
    "joy",
    "hope",
    "startup",
    "business",
    "technology",
    "coding",
    "innovation",
]

POSITIVE_WORDS = ["better", "good", "happy", "calm", "peaceful", "hopeful", "confident"]
NEGATIVE_WORDS = ["anxious", "worried", "scared", "stressed", "overwhelmed", "sad", "angry"]

# A side wins only when it outweighs the other by this factor
MOOD_DOMINANCE_RATIO = 1.5

# Journal themes derived from the user's side of a conversation
JOURNAL_THEME_KEYWORDS: Dict[str, List[str]] = {
    "anxiety": [
        "anxiety", "anxious", "stress", "worry", "worried",
        "fear", "overwhelm", "panic", "nervous", "concerned",
    ],
    "business": [
        "startup", "business", "strategy", "funding",
        "product", "market", "growth", "revenue",
    ],
    "technical": [
        "code", "technical", "development", "engineering", "architecture", "system",
    ],
    "life-planning": [
        "decision", "life", "future", "career", "relationship", "family", "personal",
    ],
}

DEFAULT_JOURNAL_MOOD = 5
LOW_JOURNAL_MOOD = 3
HIGH_JOURNAL_MOOD = 7
HIGH_ANXIETY_LEVEL = 8
DEFAULT_ANXIETY_LEVEL = 5
TITLE_MAX_CHARS = 50
UNTITLED_CONVERSATION = "Night Conversation"


def extract_tags(text: str) -> List[str]:
    """
    Tag text with every topic keyword it contains.

    Returns:
        Unique tags in vocabulary order; empty list when nothing matches.
    """
    lowered = (text or "").lower()
    return [keyword for keyword in TOPIC_KEYWORDS if keyword in lowered]


def extract_all_tags(messages: Iterable[Message]) -> List[str]:
    """Union of tags across every message's content."""
    return merge_unique(*(extract_tags(m.content) for m in messages))


def count_mood_words(messages: Iterable[Message]) -> tuple:
    """
    Count (positive, negative) word hits.

    Each word scores at most once per message.
    """
    positive = 0
    negative = 0
    for message in messages:
        content = message.content.lower()
        positive += sum(1 for word in POSITIVE_WORDS if word in content)
        negative += sum(1 for word in NEGATIVE_WORDS if word in content)
    return positive, negative


def classify_counts(positive: int, negative: int) -> ConversationMood:
    """Apply the dominance rule to a pair of counts. Ties are neutral."""
    if positive > negative * MOOD_DOMINANCE_RATIO:
        return ConversationMood.POSITIVE
    if negative > positive * MOOD_DOMINANCE_RATIO:
        return ConversationMood.NEGATIVE
    return ConversationMood.NEUTRAL


def classify_conversation_mood(messages: Iterable[Message]) -> ConversationMood:
    """Overall mood of a conversation from all of its messages."""
    return classify_counts(*count_mood_words(messages))


@dataclass
class ConversationDigest:
    """Everything a journal entry needs from a conversation."""
    title: str
    summary: str
    tags: List[str]
    mood: int
    anxiety_level: int
    message_count: int
    user_message_count: int
    assistant_message_count: int
    theme_hits: Dict[str, int] = field(default_factory=dict)

    @property
    def content(self) -> str:
        return (
            f"Conversation Summary: {self.summary}\n\n"
            f"Key Topics: {', '.join(self.tags)}\n"
            f"Messages: {self.message_count} total "
            f"({self.user_message_count} from you, {self.assistant_message_count} from NightMind)"
        )


def count_theme_hits(text: str) -> Dict[str, int]:
    """Number of distinct keywords per journal theme found in text."""
    lowered = (text or "").lower()
    return {
        theme: sum(1 for keyword in keywords if keyword in lowered)
        for theme, keywords in JOURNAL_THEME_KEYWORDS.items()
    }


def estimate_journal_mood(anxiety_hits: int, business_hits: int) -> int:
    """
    Derive a 1-10 mood for a conversation-derived entry.

    Many anxiety keywords pull the mood down; lots of business talk with
    little anxiety pushes it up and takes precedence.
    """
    mood = DEFAULT_JOURNAL_MOOD
    if anxiety_hits > 2:
        mood = LOW_JOURNAL_MOOD
    if business_hits > 2 and anxiety_hits < 2:
        mood = HIGH_JOURNAL_MOOD
    return mood


def make_title(first_user_message: str) -> str:
    if not first_user_message:
        return UNTITLED_CONVERSATION
    if len(first_user_message) > TITLE_MAX_CHARS:
        return first_user_message[:TITLE_MAX_CHARS] + "..."
    return first_user_message


def digest_conversation(conversation: Conversation) -> ConversationDigest:
    """Summarize a conversation into journal-ready fields (user messages only)."""
    user_messages = conversation.user_messages
    assistant_messages = conversation.assistant_messages

    hits = count_theme_hits(" ".join(m.content for m in user_messages))
    tags = [theme for theme, count in hits.items() if count > 0]

    anxiety_hits = hits["anxiety"]
    first_message = user_messages[0].content if user_messages else ""

    return ConversationDigest(
        title=make_title(first_message),
        summary=f"Conversation about {', '.join(tags)}. {len(user_messages)} messages exchanged.",
        tags=tags,
        mood=estimate_journal_mood(anxiety_hits, hits["business"]),
        anxiety_level=HIGH_ANXIETY_LEVEL if anxiety_hits > 2 else DEFAULT_ANXIETY_LEVEL,
        message_count=len(conversation.messages),
        user_message_count=len(user_messages),
        assistant_message_count=len(assistant_messages),
        theme_hits=hits,
    )
