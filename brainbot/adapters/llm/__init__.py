"""LLM adapters — OpenAI REST client."""

from brainbot.adapters.llm.openai_adapter import OpenAIAdapter, parse_classification

__all__ = [
    "OpenAIAdapter",
    "parse_classification",
]
