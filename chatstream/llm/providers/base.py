"""Abstract base class for LLM providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping

from chatstream.llm.stream_result import StreamResult
from chatstream.llm.types import Message
from chatstream.tools.base import Tool


class Provider(ABC):
    """
    A provider encapsulates access to a single LLM endpoint.

    ``stream_text`` starts a generation and returns immediately with a
    ``StreamResult``; no tokens are requested until one of the result's
    readers is consumed.  The provider drives tool rounds itself: when the
    model calls tools, it executes them and continues, at most
    ``max_tool_rounds`` model calls in total.
    """

    @abstractmethod
    async def stream_text(
        self,
        *,
        model: str,
        messages: list[Message],
        system: str | None = None,
        tools: Mapping[str, Tool] | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        max_tool_rounds: int = 5,
    ) -> StreamResult:
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name (e.g. ``"openai-compat"``)."""
        ...
