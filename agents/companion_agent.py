"""CompanionAgent - the Completion Service

Produces NightMind's reply to each user turn.

Design Decisions:
    1. Tone Calibration: the user's preferred communication style is appended
       to the system prompt (one cached model per style)
    2. Full History: the whole conversation is sent on every turn
    3. Bounded Wait: every Gemini call carries a request timeout
    4. Fail Loudly: any model problem surfaces as CollaboratorFailure so the
       conversation store can substitute its fallback message
"""
from typing import Callable, Dict, List, Optional
import logging

from config.llm import get_gemini_model
from config.settings import COMPLETION_TIMEOUT_SECONDS
from core.errors import CollaboratorFailure
from core.observability import Tracer
from models.session import CommunicationStyle, CompletionResult, Message, Sender
from tools.text_signals import extract_tags

logger = logging.getLogger(__name__)

SERVICE_NAME = "CompletionService"

SYSTEM_PROMPT = """You are NightMind, an empathetic AI companion designed to help people process anxiety and late-night thoughts. You are:

- Warm, understanding, and non-judgmental
- Skilled at asking clarifying questions to help users explore their thoughts
- Focused on providing emotional support and practical coping strategies
- Able to recognize anxiety patterns and gently guide users toward healthier perspectives
- Conversational and friendly, avoiding clinical or robotic language

Remember to:
- Validate the user's feelings
- Ask open-ended questions to encourage reflection
- Suggest practical coping techniques when appropriate
- Be supportive but not prescriptive
- Encourage professional help for serious mental health concerns"""

STYLE_GUIDANCE = {
    CommunicationStyle.EMPATHETIC: "Be especially warm and emotionally supportive.",
    CommunicationStyle.DIRECT: "Be direct and solution-focused.",
    CommunicationStyle.ANALYTICAL: "Use logical analysis and structured thinking.",
}

GENERATION_CONFIG = {
    "temperature": 0.7,
    "top_p": 0.9,
    "max_output_tokens": 500,
}


def build_system_prompt(style: CommunicationStyle) -> str:
    guidance = STYLE_GUIDANCE.get(style, STYLE_GUIDANCE[CommunicationStyle.EMPATHETIC])
    return f"{SYSTEM_PROMPT}\n\nCommunication style: {guidance}"


def to_gemini_contents(messages: List[Message]) -> List[Dict]:
    """Map chat history onto Gemini's user/model turns."""
    return [
        {
            "role": "user" if m.sender == Sender.USER else "model",
            "parts": [m.content],
        }
        for m in messages
    ]


class CompanionAgent:
    """Gemini-backed Completion Service."""

    def __init__(self, model_factory: Callable = get_gemini_model,
                 timeout: float = COMPLETION_TIMEOUT_SECONDS):
        self.model_factory = model_factory
        self.timeout = timeout
        self._models: Dict[CommunicationStyle, object] = {}

    def _model_for(self, style: CommunicationStyle):
        if style not in self._models:
            self._models[style] = self.model_factory(system_instruction=build_system_prompt(style))
        return self._models[style]

    def complete(self, messages: List[Message],
                 style: Optional[CommunicationStyle] = None) -> CompletionResult:
        """
        Generate the assistant reply for the latest user turn.

        Raises:
            CollaboratorFailure: model missing, timed out, blocked or errored.
        """
        style = style or CommunicationStyle.EMPATHETIC
        model = self._model_for(style)
        if model is None:
            raise CollaboratorFailure(SERVICE_NAME, "The companion is offline right now")

        with Tracer(SERVICE_NAME, messages[-1].content if messages else None):
            try:
                response = model.generate_content(
                    to_gemini_contents(messages),
                    generation_config=GENERATION_CONFIG,
                    request_options={"timeout": self.timeout},
                )
                text = response.text.strip()
            except Exception as e:
                logger.error(f"Gemini completion failed: {e}", exc_info=True)
                raise CollaboratorFailure(SERVICE_NAME) from e

            if not text:
                raise CollaboratorFailure(SERVICE_NAME, "The companion returned an empty reply")

        logger.info(f"CompanionAgent: generated {style.value} reply ({len(text)} chars)")
        return CompletionResult(content=text, tags=extract_tags(text))
