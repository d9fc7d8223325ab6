"""Core types for the LLM subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Message:
    """A single message in a conversation."""

    role: str  # "user", "assistant", "tool"
    content: str
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None
    name: str | None = None
    result: Any = None


@dataclass
class ToolCall:
    """A resolved tool call with parsed arguments."""

    id: str
    name: str
    arguments: dict


@dataclass
class RawToolDelta:
    """
    An incremental delta for a streaming tool call.

    Providers emit these as tool-call fragments arrive.  The ToolCallAssembler
    accumulates them and produces finished ToolCall objects.
    """

    call_index: int
    id: str | None = None
    name_delta: str = ""
    args_delta: str = ""


@dataclass
class StreamPart:
    """
    One event of a provider's full stream.

    *type* is one of ``text-delta``, ``tool-call``, ``tool-result``,
    ``step-finish``, ``finish`` or ``error``.  Only the fields relevant to
    the type are populated.
    """

    type: str
    text_delta: str = ""
    tool_call: ToolCall | None = None
    tool_result: Any = None
    finish_reason: str | None = None
    error: Any = None


@dataclass
class StepResult:
    """Outcome of one model round inside a provider call."""

    text: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    finish_reason: str | None = None
