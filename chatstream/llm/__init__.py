"""LLM subsystem -- providers, buffered stream results, and prompt assembly."""

from chatstream.llm.messages import build_messages
from chatstream.llm.stream_result import StreamResult
from chatstream.llm.tool_call_assembler import ToolCallAssembler
from chatstream.llm.types import Message, RawToolDelta, StepResult, StreamPart, ToolCall

__all__ = [
    "Message",
    "RawToolDelta",
    "StepResult",
    "StreamPart",
    "StreamResult",
    "ToolCall",
    "ToolCallAssembler",
    "build_messages",
]
