"""Prompt assembly: history, the new user turn, and pre-fetched tool results."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from chatstream.llm.types import Message, ToolCall
from chatstream.types import ChatMessage, MessageType

PREFETCH_ID_PREFIX = "pre-fetched-"


def _history_role(kind: Any) -> str:
    if kind == MessageType.USER or kind == MessageType.USER.value:
        return "user"
    return "assistant"


def _entry_fields(entry: ChatMessage | Mapping[str, Any]) -> tuple[Any, str]:
    if isinstance(entry, Mapping):
        return entry["type"], entry["text"]
    return entry.type, entry.text


def _to_json(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


def build_messages(
    history: Iterable[ChatMessage | Mapping[str, Any]] | None,
    text: str,
    context_data: Mapping[str, Any] | None = None,
) -> list[Message]:
    """
    Build the ordered message list for one request.

    History entries become user/assistant turns in their original order and
    *text* is appended as the newest user turn.  When *context_data* has at
    least one key, a synthetic assistant turn calling every pre-fetched tool
    (with empty arguments) follows, then one tool-result turn per key, so the
    model sees the data as answers it already received.
    """
    messages: list[Message] = []
    for entry in history or ():
        kind, entry_text = _entry_fields(entry)
        messages.append(Message(role=_history_role(kind), content=entry_text))

    messages.append(Message(role="user", content=text))

    if context_data:
        messages.append(
            Message(
                role="assistant",
                content="",
                tool_calls=[
                    ToolCall(id=f"{PREFETCH_ID_PREFIX}{name}", name=name, arguments={})
                    for name in context_data
                ],
            )
        )
        for name, value in context_data.items():
            messages.append(
                Message(
                    role="tool",
                    content=_to_json(value),
                    tool_call_id=f"{PREFETCH_ID_PREFIX}{name}",
                    name=name,
                    result=value,
                )
            )

    return messages
