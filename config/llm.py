"""LLM Configuration for NightMind.

This module handles Gemini model initialization with appropriate safety settings.
"""
import logging
from typing import Optional
import google.generativeai as genai
from config.settings import GOOGLE_API_KEY, GEMINI_MODEL_NAME

logger = logging.getLogger(__name__)


def get_gemini_model(model_name: str = GEMINI_MODEL_NAME,
                     system_instruction: Optional[str] = None):
    """
    Configures and returns a Gemini model instance.

    Args:
        model_name: Gemini model to use (default from settings)
        system_instruction: Optional system prompt baked into the model

    Returns:
        GenerativeModel instance or None if API key is missing.
    """
    if not GOOGLE_API_KEY:
        logger.warning("GOOGLE_API_KEY not set. Companion replies will use the fallback message.")
        return None

    genai.configure(api_key=GOOGLE_API_KEY)

    # Safety settings for a mental-health companion
    safety_settings = [
        {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
        {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
        {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
        {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_ONLY_HIGH"},
    ]

    model = genai.GenerativeModel(
        model_name=model_name,
        safety_settings=safety_settings,
        system_instruction=system_instruction,
    )
    return model
