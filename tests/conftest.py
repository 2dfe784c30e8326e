"""Shared fixtures: deterministic clock, collaborator fakes and an in-memory encrypted store.

No test talks to Gemini; agent tests use FakeGeminiModel instead.
"""
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.errors import CollaboratorFailure
from models.session import AnalysisResult, CompletionResult, Conversation, Message, Sender
from services.conversation_store import ConversationStore
from services.journal_store import JournalStore
from services.persistence import EncryptedStore, MemoryStorage
from tools.text_signals import classify_conversation_mood, extract_all_tags, extract_tags


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeCompletionService:
    def __init__(self, reply: str = "That sounds hard. What's weighing on you most?"):
        self.reply = reply
        self.calls = []

    def complete(self, messages, style=None):
        self.calls.append((list(messages), style))
        return CompletionResult(content=self.reply, tags=extract_tags(self.reply))


class FakeAnalysisService:
    def __init__(self, summary: str = "The user talked through a stressful day."):
        self.summary = summary
        self.calls = []

    def analyze(self, messages):
        self.calls.append(list(messages))
        return AnalysisResult(
            summary=self.summary,
            mood=classify_conversation_mood(messages),
            tags=extract_all_tags(messages),
        )


class FailingService:
    """Completion and Analysis Service that is always down."""

    def __init__(self, error: Exception = None):
        self.error = error

    def complete(self, messages, style=None):
        raise self.error or CollaboratorFailure("CompletionService")

    def analyze(self, messages):
        raise self.error or CollaboratorFailure("AnalysisService")


class FakeResponse:
    def __init__(self, text: str):
        self.text = text


class FakeGeminiModel:
    """Stands in for genai.GenerativeModel."""

    def __init__(self, text: str = "I'm here with you.", error: Exception = None,
                 system_instruction: str = None):
        self.text = text
        self.error = error
        self.system_instruction = system_instruction
        self.calls = []

    def generate_content(self, contents, **kwargs):
        self.calls.append((contents, kwargs))
        if self.error:
            raise self.error
        return FakeResponse(self.text)


class FakeModelFactory:
    """Replacement for get_gemini_model that records every model it builds."""

    def __init__(self, text: str = "I'm here with you.", error: Exception = None):
        self.text = text
        self.error = error
        self.models = []

    def __call__(self, model_name: str = None, system_instruction: str = None):
        model = FakeGeminiModel(self.text, self.error, system_instruction)
        self.models.append(model)
        return model


def make_conversation(*user_texts: str, start_time: datetime = None) -> Conversation:
    """Archived conversation alternating the given user texts with canned replies."""
    start_time = start_time or datetime(2026, 10, 1, 23, 0)
    messages = []
    for text in user_texts:
        messages.append(Message(content=text, sender=Sender.USER, timestamp=start_time))
        messages.append(Message(content="I hear you.", sender=Sender.ASSISTANT, timestamp=start_time))
    return Conversation(
        title="Session",
        messages=messages,
        start_time=start_time,
        end_time=start_time + timedelta(minutes=20),
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 23, 30))


@pytest.fixture
def encryption_key():
    return EncryptedStore.generate_key()


@pytest.fixture
def backend():
    return MemoryStorage()


@pytest.fixture
def storage(backend, encryption_key):
    return EncryptedStore(backend, encryption_key)


@pytest.fixture
def completion_service():
    return FakeCompletionService()


@pytest.fixture
def analysis_service():
    return FakeAnalysisService()


@pytest.fixture
def conversation_store(completion_service, analysis_service, storage, clock):
    return ConversationStore(completion_service, analysis_service, storage=storage, clock=clock)


@pytest.fixture
def journal_store(storage, clock):
    return JournalStore(storage=storage, clock=clock)


@pytest.fixture
def conversation_factory():
    return make_conversation


@pytest.fixture
def failing_service():
    return FailingService()


@pytest.fixture
def crashing_service():
    return FailingService(RuntimeError("connection reset"))


@pytest.fixture
def model_factory():
    return FakeModelFactory()
