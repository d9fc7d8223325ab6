"""
Buffered, multi-reader view over a provider's event stream.

A provider produces a single async iterator of ``StreamPart`` objects.  The
``StreamResult`` drives that iterator lazily and exposes it three ways:

  * ``text_stream`` -- text fragments only.  An error after some text is
    raised once those fragments are delivered; an error before any text
    ends the channel quietly and is left to ``full_stream`` readers.
  * ``full_stream`` -- every part, including ``error`` parts.
  * ``text`` / ``tool_calls`` / ``finish_reason`` -- awaitables that settle
    once the producer is exhausted.

Parts are buffered and each reader keeps its own cursor, so ``full_stream``
read after ``text_stream`` replays everything from the start.  An exception
escaping the producer is turned into a trailing ``error`` part and rejects
the settlement values.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Callable

from chatstream.llm.types import StreamPart, ToolCall

logger = logging.getLogger(__name__)


class StreamResult:
    def __init__(self, source: AsyncIterator[StreamPart]) -> None:
        self._source = source
        self._parts: list[StreamPart] = []
        self._lock = asyncio.Lock()
        self._done = False
        self._text_parts: list[str] = []
        self._tool_calls: list[ToolCall] = []
        self._finish_reason: str | None = None
        self._error: Any = None

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    @property
    def text_stream(self) -> AsyncIterator[str]:
        return self._iter_text()

    @property
    def full_stream(self) -> AsyncIterator[StreamPart]:
        return self._iter_parts()

    @property
    def text(self):
        return self._settle(lambda: "".join(self._text_parts))

    @property
    def tool_calls(self):
        return self._settle(lambda: list(self._tool_calls))

    @property
    def finish_reason(self):
        return self._settle(lambda: self._finish_reason)

    async def aclose(self) -> None:
        """Stop the producer without draining it."""
        if self._done:
            return
        self._done = True
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _iter_parts(self) -> AsyncIterator[StreamPart]:
        index = 0
        while True:
            if index < len(self._parts):
                part = self._parts[index]
                index += 1
                yield part
                continue
            if self._done:
                return
            await self._advance()

    async def _iter_text(self) -> AsyncIterator[str]:
        delivered = False
        async for part in self._iter_parts():
            if part.type == "error":
                if delivered:
                    raise _as_exception(part.error)
            elif part.type == "text-delta" and part.text_delta:
                delivered = True
                yield part.text_delta

    async def _settle(self, getter: Callable[[], Any]) -> Any:
        while not self._done:
            await self._advance()
        if self._error is not None:
            raise _as_exception(self._error)
        return getter()

    async def _advance(self) -> None:
        async with self._lock:
            if self._done:
                return
            try:
                part = await self._source.__anext__()
            except StopAsyncIteration:
                self._done = True
                return
            except Exception as exc:
                logger.warning("Provider stream failed: %s", exc)
                self._done = True
                self._record(StreamPart(type="error", error=exc))
                return
            self._record(part)

    def _record(self, part: StreamPart) -> None:
        self._parts.append(part)
        if part.type == "text-delta":
            self._text_parts.append(part.text_delta)
        elif part.type == "tool-call" and part.tool_call is not None:
            self._tool_calls.append(part.tool_call)
        elif part.type == "finish":
            self._finish_reason = part.finish_reason
        elif part.type == "error" and self._error is None:
            self._error = part.error


def _as_exception(error: Any) -> BaseException:
    if isinstance(error, BaseException):
        return error
    return RuntimeError(str(error))
