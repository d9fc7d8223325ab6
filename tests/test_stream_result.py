"""Tests for the buffered StreamResult."""

from __future__ import annotations

import pytest

from chatstream.llm.stream_result import StreamResult
from chatstream.llm.types import StreamPart, ToolCall

CALL = ToolCall(id="c1", name="lookup", arguments={})


async def _source(parts, error=None, pulled=None):
    for part in parts:
        if pulled is not None:
            pulled.append(part)
        yield part
    if error is not None:
        raise error


def _parts():
    return [
        StreamPart(type="text-delta", text_delta="Hello "),
        StreamPart(type="tool-call", tool_call=CALL),
        StreamPart(type="tool-result", tool_call=CALL, tool_result={"ok": True}),
        StreamPart(type="text-delta", text_delta="world"),
        StreamPart(type="finish", finish_reason="stop"),
    ]


class TestReaders:
    async def test_text_stream_only_text(self):
        result = StreamResult(_source(_parts()))
        assert [t async for t in result.text_stream] == ["Hello ", "world"]

    async def test_full_stream_replays_after_text_stream(self):
        result = StreamResult(_source(_parts()))
        _ = [t async for t in result.text_stream]
        types = [p.type async for p in result.full_stream]
        assert types == ["text-delta", "tool-call", "tool-result", "text-delta", "finish"]

    async def test_settlement_values(self):
        result = StreamResult(_source(_parts()))
        assert await result.text == "Hello world"
        assert await result.tool_calls == [CALL]
        assert await result.finish_reason == "stop"
        # Re-reading returns the same values.
        assert await result.text == "Hello world"

    async def test_lazy_until_read(self):
        pulled: list[StreamPart] = []
        result = StreamResult(_source(_parts(), pulled=pulled))
        assert pulled == []
        stream = result.text_stream
        assert await stream.__anext__() == "Hello "
        assert len(pulled) == 1
        await stream.aclose()


class TestErrors:
    async def test_producer_error_becomes_error_part(self):
        boom = RuntimeError("socket closed")
        result = StreamResult(_source(_parts()[:1], error=boom))

        parts = [p async for p in result.full_stream]
        assert parts[-1].type == "error"
        assert parts[-1].error is boom

    async def test_text_stream_raises_error_after_text(self):
        boom = RuntimeError("socket closed")
        result = StreamResult(_source(_parts()[:1], error=boom))

        received: list[str] = []
        with pytest.raises(RuntimeError, match="socket closed"):
            async for fragment in result.text_stream:
                received.append(fragment)

        assert received == ["Hello "]

    async def test_text_stream_ends_quietly_on_error_before_text(self):
        boom = RuntimeError("socket closed")
        result = StreamResult(_source([], error=boom))

        assert [t async for t in result.text_stream] == []
        assert [p.error async for p in result.full_stream] == [boom]

    async def test_error_rejects_settlement(self):
        boom = RuntimeError("socket closed")
        result = StreamResult(_source([], error=boom))
        with pytest.raises(RuntimeError, match="socket closed"):
            await result.text
        with pytest.raises(RuntimeError):
            await result.finish_reason

    async def test_explicit_error_part_rejects_settlement(self):
        result = StreamResult(_source([StreamPart(type="error", error="quota exceeded")]))
        with pytest.raises(Exception, match="quota exceeded"):
            await result.tool_calls


class TestClose:
    async def test_aclose_stops_producer(self):
        pulled: list[StreamPart] = []
        result = StreamResult(_source(_parts(), pulled=pulled))
        stream = result.text_stream
        await stream.__anext__()
        await stream.aclose()
        await result.aclose()

        assert [t async for t in result.text_stream] == ["Hello "]
        assert len(pulled) == 1
