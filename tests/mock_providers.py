"""
Mock LLM providers for testing.

Provides scripted stream results so tests can drive every tier of the
orchestrator without hitting real APIs.
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Callable, Sequence

from chatstream.llm.providers.base import Provider
from chatstream.llm.types import StreamPart, ToolCall

# Settlement value that never resolves.
HANG = object()


async def _resolve(value: Any) -> Any:
    if value is HANG:
        await asyncio.Event().wait()
    if isinstance(value, BaseException):
        raise value
    return value


async def _iterate(items: Sequence[Any]) -> AsyncIterator[Any]:
    for item in items:
        await asyncio.sleep(0)
        yield item


class ScriptedResult:
    """
    A stand-in for ``StreamResult`` with fully scripted channels.

    Parameters
    ----------
    text_chunks:
        Fragments yielded by ``text_stream``.
    parts:
        ``StreamPart`` objects yielded by ``full_stream``.
    text:
        Value of ``result.text``.  A list gives one value per read (the last
        one repeats).  ``HANG`` never resolves; an exception rejects.
    tool_calls, finish_reason:
        Values of the other settlement awaitables, same conventions.
    """

    def __init__(
        self,
        text_chunks: Sequence[str] = (),
        parts: Sequence[StreamPart] = (),
        text: Any = "",
        tool_calls: Any = (),
        finish_reason: Any = "stop",
    ) -> None:
        self._text_chunks = list(text_chunks)
        self._parts = list(parts)
        self._text_reads = list(text) if isinstance(text, list) else [text]
        self._tool_calls = list(tool_calls) if isinstance(tool_calls, tuple) else tool_calls
        self._finish_reason = finish_reason
        self.text_stream_reads = 0
        self.full_stream_reads = 0
        self.text_awaits = 0
        self.tool_calls_awaits = 0
        self.finish_reason_awaits = 0
        self.closed = False

    @property
    def text_stream(self) -> AsyncIterator[str]:
        self.text_stream_reads += 1
        return _iterate(self._text_chunks)

    @property
    def full_stream(self) -> AsyncIterator[StreamPart]:
        self.full_stream_reads += 1
        return _iterate(self._parts)

    @property
    def text(self):
        value = self._text_reads[min(self.text_awaits, len(self._text_reads) - 1)]
        self.text_awaits += 1
        return _resolve(value)

    @property
    def tool_calls(self):
        self.tool_calls_awaits += 1
        return _resolve(self._tool_calls)

    @property
    def finish_reason(self):
        self.finish_reason_awaits += 1
        return _resolve(self._finish_reason)

    @property
    def settlement_reads(self) -> int:
        return self.text_awaits + self.tool_calls_awaits + self.finish_reason_awaits

    async def aclose(self) -> None:
        self.closed = True


class ScriptedProvider(Provider):
    """
    A provider returning pre-built results.

    Usage::

        provider = ScriptedProvider(ScriptedResult(text_chunks=["Hi"]))

    Pass *factory* to build a fresh result per call, or *error* to make the
    call itself fail.
    """

    def __init__(
        self,
        result: ScriptedResult | None = None,
        *,
        factory: Callable[[], ScriptedResult] | None = None,
        error: BaseException | None = None,
    ) -> None:
        self._result = result
        self._factory = factory
        self._error = error
        self.call_count = 0
        self.last_kwargs: dict | None = None
        self.results: list[ScriptedResult] = []

    @property
    def name(self) -> str:
        return "scripted"

    async def stream_text(self, **kwargs):
        self.call_count += 1
        self.last_kwargs = kwargs
        if self._error is not None:
            raise self._error
        result = self._factory() if self._factory else self._result or ScriptedResult()
        self.results.append(result)
        return result


def make_text_provider(text: str) -> ScriptedProvider:
    """A provider whose text stream carries *text* one word at a time."""
    words = text.split(" ")
    chunks = [w + (" " if i < len(words) - 1 else "") for i, w in enumerate(words)]
    return ScriptedProvider(factory=lambda: ScriptedResult(text_chunks=chunks))


def tool_call(name: str = "lookup", call_id: str = "call_1") -> ToolCall:
    return ToolCall(id=call_id, name=name, arguments={})
