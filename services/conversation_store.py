"""Conversation Store

Owns the user profile, the single Active conversation and the archive of
ended conversations.

Lifecycle per conversation: Active -> Ended (terminal). Every mutation is
written through the encrypted store before the call returns.

Policy for an unfinished Active conversation when a new one is created:
a conversation with messages is archived as-is (no analysis); an empty one
is discarded.
"""
import logging
from collections import Counter
from datetime import datetime
from typing import Callable, List, Optional

from core.errors import CollaboratorFailure, NotFoundError, ValidationError
from config.settings import CONVERSATION_STORAGE_KEY
from models.journal import Insight, InsightType
from models.session import (
    CommunicationStyle,
    Conversation,
    EndResult,
    Message,
    MessageMood,
    Sender,
    TurnResult,
    UserProfile,
    merge_unique,
)
from services.persistence import EncryptedStore
from tools.text_signals import extract_tags

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I'm having trouble connecting right now. Please try again in a moment."

ANXIETY_SCALE = range(1, 11)

PROFILE_FIELDS = {"name", "preferred_communication_style", "triggers", "coping_strategies", "goals"}


def validate_anxiety_level(value: Optional[int], field_name: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value not in ANXIETY_SCALE:
        raise ValidationError("Anxiety level must be a number between 1 and 10", field=field_name)
    return value


class ConversationStore:
    """
    Conversation lifecycle and archive for a single local user.

    Concurrent add_message calls on the same store are not safe; callers
    serialize them.
    """

    def __init__(self, completion_service, analysis_service,
                 storage: Optional[EncryptedStore] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.completion_service = completion_service
        self.analysis_service = analysis_service
        self._storage = storage
        self._clock = clock

        self.profile = UserProfile(created_at=clock())
        self.conversations: List[Conversation] = []
        self.current_conversation: Optional[Conversation] = None

        if storage is not None:
            self._load()

    # === Conversation lifecycle ===

    def create_conversation(self, anxiety_level_before: Optional[int] = None) -> Conversation:
        """Start a new Active conversation, replacing the current reference."""
        anxiety_level_before = validate_anxiety_level(anxiety_level_before, "anxiety_level_before")

        abandoned = self.current_conversation
        if abandoned is not None and abandoned.is_active:
            if abandoned.messages:
                abandoned.end_time = self._clock()
                self._archive(abandoned)
                logger.warning(f"Archived unfinished conversation {abandoned.id} without analysis")
            else:
                logger.info(f"Discarded empty conversation {abandoned.id}")

        now = self._clock()
        conversation = Conversation(
            title=f"Session {now:%b %d, %Y}",
            start_time=now,
            anxiety_level_before=anxiety_level_before,
        )
        self.current_conversation = conversation
        self._persist()
        logger.info(f"Created conversation: {conversation.id}")
        return conversation

    def add_message(self, text: str, mood: Optional[MessageMood] = None) -> Optional[TurnResult]:
        """
        Append a user turn and the assistant's reply.

        Returns:
            None when there is no Active conversation, otherwise a TurnResult
            holding exactly two new messages (or none for a read-only, already
            ended conversation). A Completion Service failure is reported in
            TurnResult.warning and replaced by a fallback reply.
        """
        conversation = self.current_conversation
        if conversation is None:
            logger.debug("add_message ignored: no active conversation")
            return None
        if not conversation.is_active:
            return TurnResult(conversation=conversation, warning="This conversation has ended")

        if not text or not text.strip():
            raise ValidationError("Message content is required", field="content")
        if mood is not None and not isinstance(mood, MessageMood):
            try:
                mood = MessageMood(mood)
            except ValueError:
                raise ValidationError(f"Unknown mood '{mood}'", field="mood") from None

        user_message = Message(
            content=text,
            sender=Sender.USER,
            timestamp=self._clock(),
            mood=mood,
            tags=tuple(extract_tags(text)),
        )
        conversation.messages.append(user_message)

        warning = None
        try:
            completion = self.completion_service.complete(
                list(conversation.messages),
                self.profile.preferred_communication_style,
            )
            reply = Message(
                content=completion.content,
                sender=Sender.ASSISTANT,
                timestamp=self._clock(),
                tags=tuple(completion.tags),
            )
        except CollaboratorFailure as e:
            logger.warning(f"Completion failed, using fallback reply: {e.message}")
            warning = e.message
            reply = Message(content=FALLBACK_REPLY, sender=Sender.ASSISTANT, timestamp=self._clock())
        except Exception as e:
            logger.error(f"Completion service error, using fallback reply: {e}", exc_info=True)
            warning = CollaboratorFailure("CompletionService").message
            reply = Message(content=FALLBACK_REPLY, sender=Sender.ASSISTANT, timestamp=self._clock())

        conversation.messages.append(reply)
        conversation.tags = merge_unique(conversation.tags, user_message.tags, reply.tags)
        self._persist()

        return TurnResult(conversation=conversation, messages=[user_message, reply], warning=warning)

    def end_conversation(self, anxiety_level_after: Optional[int] = None) -> Optional[EndResult]:
        """
        End and archive the Active conversation.

        Returns:
            None (no-op) when there is no Active conversation or it is empty.
        """
        conversation = self.current_conversation
        if conversation is None or not conversation.messages:
            return None
        anxiety_level_after = validate_anxiety_level(anxiety_level_after, "anxiety_level_after")

        if not conversation.is_active:
            # Resumed from the archive: already ended, only release the reference
            self.current_conversation = None
            self._persist()
            return EndResult(conversation=conversation)

        warning = None
        try:
            analysis = self.analysis_service.analyze(list(conversation.messages))
            conversation.summary = analysis.summary
            conversation.mood = analysis.mood
            conversation.tags = merge_unique(conversation.tags, analysis.tags)
        except CollaboratorFailure as e:
            logger.warning(f"Analysis failed, archiving {conversation.id} without it: {e.message}")
            warning = e.message
        except Exception as e:
            logger.error(f"Analysis service error, archiving {conversation.id} without it: {e}", exc_info=True)
            warning = CollaboratorFailure("AnalysisService").message

        conversation.end_time = self._clock()
        conversation.anxiety_level_after = anxiety_level_after
        self._archive(conversation)
        self.current_conversation = None
        self._persist()

        logger.info(f"Ended conversation {conversation.id} ({len(conversation.messages)} messages)")
        return EndResult(conversation=conversation, warning=warning)

    def set_current_conversation(self, conversation: Optional[Conversation]):
        """Point the Active reference at a conversation (or clear it)."""
        self.current_conversation = conversation
        self._persist()

    # === Archive ===

    def get_conversation(self, conversation_id: str) -> Conversation:
        for conversation in self.conversations:
            if conversation.id == conversation_id:
                return conversation
        raise NotFoundError("Conversation", conversation_id)

    def list_conversations(self, search: Optional[str] = None) -> List[Conversation]:
        """Archived conversations, newest first, optionally filtered by text."""
        results = sorted(self.conversations, key=lambda c: c.start_time, reverse=True)
        if search:
            needle = search.lower()
            results = [c for c in results if self._matches(c, needle)]
        return results

    @staticmethod
    def _matches(conversation: Conversation, needle: str) -> bool:
        if needle in conversation.title.lower():
            return True
        if conversation.summary and needle in conversation.summary.lower():
            return True
        return any(needle in m.content.lower() for m in conversation.messages)

    def theme_insights(self, min_count: int = 3) -> List[Insight]:
        """Pattern insights for tags that recur across archived conversations."""
        tag_frequency = Counter(tag for c in self.conversations for tag in c.tags)
        now = self._clock()
        return [
            Insight(
                type=InsightType.PATTERN,
                title=f"Recurring Theme: {tag}",
                description=(
                    f"You've discussed {tag} in {count} conversations. "
                    "This seems to be an important topic for you."
                ),
                frequency=count,
                last_occurrence=now,
            )
            for tag, count in tag_frequency.items()
            if count >= min_count
        ]

    def _archive(self, conversation: Conversation):
        for index, existing in enumerate(self.conversations):
            if existing.id == conversation.id:
                self.conversations[index] = conversation
                return
        self.conversations.append(conversation)

    # === Profile ===

    def update_user_profile(self, **changes) -> UserProfile:
        unknown = set(changes) - PROFILE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

        style = changes.get("preferred_communication_style")
        if style is not None and not isinstance(style, CommunicationStyle):
            try:
                changes["preferred_communication_style"] = CommunicationStyle(style)
            except ValueError:
                raise ValidationError(f"Unknown communication style '{style}'",
                                      field="preferred_communication_style") from None

        for key, value in changes.items():
            setattr(self.profile, key, list(value) if isinstance(value, (list, tuple)) else value)
        self._persist()
        return self.profile

    # === Persistence ===

    def to_dict(self) -> dict:
        return {
            "userProfile": self.profile.to_dict(),
            "conversations": [c.to_dict() for c in self.conversations],
            "currentConversation": (
                self.current_conversation.to_dict() if self.current_conversation else None
            ),
        }

    def _persist(self):
        if self._storage is not None:
            self._storage.set(CONVERSATION_STORAGE_KEY, self.to_dict())

    def _load(self):
        data = self._storage.get(CONVERSATION_STORAGE_KEY)
        if not data:
            logger.info("No saved conversation state, starting fresh")
            return
        try:
            self.profile = UserProfile.from_dict(data["userProfile"])
            self.conversations = [Conversation.from_dict(c) for c in data.get("conversations", [])]
            current = data.get("currentConversation")
            self.current_conversation = Conversation.from_dict(current) if current else None
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Saved conversation state is malformed, starting fresh: {e!r}")
            self.profile = UserProfile(created_at=self._clock())
            self.conversations = []
            self.current_conversation = None
            return

        # Keep a resumed archive conversation pointing at the archive record
        if self.current_conversation is not None and not self.current_conversation.is_active:
            for conversation in self.conversations:
                if conversation.id == self.current_conversation.id:
                    self.current_conversation = conversation
                    break
        logger.info(f"Loaded {len(self.conversations)} archived conversations")
