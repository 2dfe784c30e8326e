"""NightMind Data Models.

This module contains the dataclasses for conversation and journal state.

Models:
    UserProfile: Long-term user information and preferences.
    Message: A single chat message.
    Conversation: An active or archived chat session.
    JournalEntry: Manual or conversation-derived journal entry.
    MoodEntry: Explicit mood check-in.
    Insight: Derived observation about recurring themes.
    JournalStats: Dashboard aggregates.
"""
from models.session import (
    UserProfile,
    Message,
    Conversation,
    Sender,
    CommunicationStyle,
    MessageMood,
    ConversationMood,
    CompletionResult,
    AnalysisResult,
    TurnResult,
    EndResult,
)
from models.journal import (
    JournalEntry,
    MoodEntry,
    Insight,
    InsightType,
    EntryPage,
    JournalStats,
)

__all__ = [
    "UserProfile",
    "Message",
    "Conversation",
    "Sender",
    "CommunicationStyle",
    "MessageMood",
    "ConversationMood",
    "CompletionResult",
    "AnalysisResult",
    "TurnResult",
    "EndResult",
    "JournalEntry",
    "MoodEntry",
    "Insight",
    "InsightType",
    "EntryPage",
    "JournalStats",
]
