"""LLM integration helpers."""

from .anthropic_client import AnthropicChatClient
from .answer_generator import AnswerGenerator, ChatOutcome
from .openai_client import OpenAIChatClient

__all__ = ["AnswerGenerator", "AnthropicChatClient", "ChatOutcome", "OpenAIChatClient"]
