"""Provider adapters: the invoker protocol and concrete backends."""

from textconsensus.providers.base import ProviderInvoker
from textconsensus.providers.openai_provider import OpenAIProvider
from textconsensus.providers.parser import parse_analysis

__all__ = ["ProviderInvoker", "OpenAIProvider", "parse_analysis"]
