"""NightMind Tools Module.

This module contains deterministic text heuristics (no LLM involved).

Tools:
    extract_tags: Tag text with topic keywords.
    extract_all_tags: Union of tags across messages.
    classify_conversation_mood: Positive/negative/neutral from keyword balance.
    digest_conversation: Journal-ready digest of a conversation.
"""
from tools.text_signals import (
    TOPIC_KEYWORDS,
    extract_tags,
    extract_all_tags,
    count_mood_words,
    classify_counts,
    classify_conversation_mood,
    count_theme_hits,
    estimate_journal_mood,
    digest_conversation,
    ConversationDigest,
)

__all__ = [
    "TOPIC_KEYWORDS",
    "extract_tags",
    "extract_all_tags",
    "count_mood_words",
    "classify_counts",
    "classify_conversation_mood",
    "count_theme_hits",
    "estimate_journal_mood",
    "digest_conversation",
    "ConversationDigest",
]
