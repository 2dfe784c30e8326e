"""Tests for the deterministic text signals (tagger, mood classifier, journal digest)."""
import pytest

from models.session import ConversationMood, Message, Sender
from tools.text_signals import (
    TOPIC_KEYWORDS,
    UNTITLED_CONVERSATION,
    classify_conversation_mood,
    classify_counts,
    count_mood_words,
    digest_conversation,
    estimate_journal_mood,
    extract_all_tags,
    extract_tags,
    make_title,
)


def user(text):
    return Message(content=text, sender=Sender.USER)


class TestKeywordTagger:
    """Topic tags come from a fixed vocabulary."""

    @pytest.mark.parametrize("text", [
        "I feel stress about work and my startup",
        "Can't SLEEP, thinking about money and the future",
        "self-doubt is creeping into my coding again",
        "",
    ])
    def test_tags_are_subset_of_vocabulary(self, text):
        assert set(extract_tags(text)) <= set(TOPIC_KEYWORDS)

    def test_tags_in_vocabulary_order(self):
        assert extract_tags("My startup work causes stress") == ["stress", "work", "startup"]

    def test_case_insensitive(self):
        assert extract_tags("ANXIETY and Family") == ["anxiety", "family"]

    def test_idempotent(self):
        text = "Worried about my career and my relationship"
        first = extract_tags(text)
        assert extract_tags(text) == first
        assert extract_tags(" ".join(first)) == first

    def test_no_keywords_gives_empty(self):
        assert extract_tags("the weather is nice today") == []
        assert extract_tags(None) == []

    def test_union_across_messages(self):
        messages = [user("work is a lot"), user("and sleep is bad"), user("work again")]
        assert extract_all_tags(messages) == ["work", "sleep"]


class TestMoodClassifier:
    """A side wins only when it outweighs the other by 1.5x."""

    def test_positive_conversation(self):
        messages = [user("I feel happy and calm tonight")]
        assert classify_conversation_mood(messages) == ConversationMood.POSITIVE

    def test_negative_conversation(self):
        messages = [user("I'm anxious and overwhelmed"), user("so stressed")]
        assert classify_conversation_mood(messages) == ConversationMood.NEGATIVE

    def test_each_word_counts_once_per_message(self):
        messages = [user("sad sad sad"), user("happy")]
        assert count_mood_words(messages) == (1, 1)

    @pytest.mark.parametrize("positive,negative", [(3, 1), (5, 0), (2, 1), (4, 3), (1, 0)])
    def test_symmetric(self, positive, negative):
        result = classify_counts(positive, negative)
        swapped = classify_counts(negative, positive)
        mirror = {
            ConversationMood.POSITIVE: ConversationMood.NEGATIVE,
            ConversationMood.NEGATIVE: ConversationMood.POSITIVE,
            ConversationMood.NEUTRAL: ConversationMood.NEUTRAL,
        }
        assert swapped == mirror[result]

    @pytest.mark.parametrize("count", [0, 1, 4])
    def test_ties_are_neutral(self, count):
        assert classify_counts(count, count) == ConversationMood.NEUTRAL

    def test_needs_dominance(self):
        assert classify_counts(3, 2) == ConversationMood.NEUTRAL
        assert classify_counts(4, 2) == ConversationMood.POSITIVE


class TestConversationDigest:
    """Journal fields derived from the user's side of a conversation."""

    def test_anxiety_and_decision_tags(self, conversation_factory):
        digest = digest_conversation(
            conversation_factory("I'm anxious about work and worried about my decision")
        )
        assert digest.tags == ["anxiety", "life-planning"]
        assert digest.mood == 5
        assert digest.anxiety_level == 5

    def test_heavy_anxiety_lowers_mood(self, conversation_factory):
        digest = digest_conversation(conversation_factory("anxious, panic, nervous and stressed"))
        assert digest.theme_hits["anxiety"] == 4
        assert digest.mood == 3
        assert digest.anxiety_level == 8

    def test_business_focus_raises_mood(self, conversation_factory):
        digest = digest_conversation(conversation_factory("startup strategy, funding and growth"))
        assert digest.tags == ["business"]
        assert digest.mood == 7

    def test_business_does_not_win_over_anxiety(self):
        assert estimate_journal_mood(anxiety_hits=3, business_hits=5) == 3
        assert estimate_journal_mood(anxiety_hits=2, business_hits=5) == 5

    def test_assistant_messages_are_ignored(self, conversation_factory):
        conversation = conversation_factory("just a quiet night")
        conversation.messages.append(
            Message(content="Is your startup making you anxious?", sender=Sender.ASSISTANT)
        )
        digest = digest_conversation(conversation)
        assert digest.tags == []

    def test_counts_and_content(self, conversation_factory):
        digest = digest_conversation(conversation_factory("first thought", "second thought"))
        assert digest.message_count == 4
        assert digest.user_message_count == 2
        assert digest.assistant_message_count == 2
        assert digest.content.startswith("Conversation Summary: ")
        assert "Messages: 4 total (2 from you, 2 from NightMind)" in digest.content

    def test_titles(self):
        long_text = "x" * 60
        assert make_title(long_text) == "x" * 50 + "..."
        assert make_title("short") == "short"
        assert make_title("") == UNTITLED_CONVERSATION
