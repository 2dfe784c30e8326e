"""AnalysisAgent - the Analysis Service

Summarizes a finished conversation. The summary comes from Gemini; the
overall mood and tag set are deterministic (tools.text_signals) so they stay
reproducible even when the model's wording changes.
"""
from typing import Callable, List
import logging

from config.llm import get_gemini_model
from config.settings import ANALYSIS_TIMEOUT_SECONDS
from core.errors import CollaboratorFailure
from core.observability import Tracer
from models.session import AnalysisResult, Message
from tools.text_signals import classify_conversation_mood, extract_all_tags

logger = logging.getLogger(__name__)

SERVICE_NAME = "AnalysisService"

ANALYST_INSTRUCTION = "You are an AI therapist analyzing conversations for patterns and insights."

GENERATION_CONFIG = {
    "temperature": 0.3,
    "max_output_tokens": 300,
}


def build_analysis_prompt(messages: List[Message]) -> str:
    transcript = "\n".join(f"{m.sender.value}: {m.content}" for m in messages)
    return f"""Analyze this anxiety conversation and provide:
1. Main themes and patterns
2. Potential triggers identified
3. Progress or improvements noted
4. Suggested coping strategies

Conversation:
{transcript}"""


class AnalysisAgent:
    """Gemini-backed Analysis Service."""

    def __init__(self, model_factory: Callable = get_gemini_model,
                 timeout: float = ANALYSIS_TIMEOUT_SECONDS):
        self.model = model_factory(system_instruction=ANALYST_INSTRUCTION)
        self.timeout = timeout

    def analyze(self, messages: List[Message]) -> AnalysisResult:
        """
        Analyze the full transcript.

        Raises:
            CollaboratorFailure: model missing, timed out, blocked or errored.
        """
        if not self.model:
            raise CollaboratorFailure(SERVICE_NAME, "Conversation analysis is offline right now")

        with Tracer(SERVICE_NAME, f"{len(messages)} messages"):
            try:
                response = self.model.generate_content(
                    build_analysis_prompt(messages),
                    generation_config=GENERATION_CONFIG,
                    request_options={"timeout": self.timeout},
                )
                summary = response.text.strip()
            except Exception as e:
                logger.error(f"Gemini analysis failed: {e}", exc_info=True)
                raise CollaboratorFailure(SERVICE_NAME) from e

        return AnalysisResult(
            summary=summary,
            mood=classify_conversation_mood(messages),
            tags=extract_all_tags(messages),
        )
