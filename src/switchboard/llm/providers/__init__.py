"""Provider handlers, one per backend service."""

from .claude_client import ClaudeLLM
from .gemini_client import GeminiLLM
from .groq_client import GroqLLM
from .local_client import LocalLLM
from .openai_client import OpenAILLM

__all__ = ["ClaudeLLM", "GeminiLLM", "GroqLLM", "LocalLLM", "OpenAILLM"]
