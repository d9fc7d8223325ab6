from chatstream.llm.providers.base import Provider
from chatstream.llm.providers.openai_compat import OpenAICompatProvider, create_provider

__all__ = ["OpenAICompatProvider", "Provider", "create_provider"]
