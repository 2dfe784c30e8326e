"""NightMind Agent Module.

Gemini-backed adapters for the two external collaborators.

Agents:
    CompanionAgent: Completion Service, replies to each user turn.
    AnalysisAgent: Analysis Service, summarizes a finished conversation.
"""
from agents.companion_agent import CompanionAgent
from agents.analysis_agent import AnalysisAgent

__all__ = [
    "CompanionAgent",
    "AnalysisAgent",
]
