from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class MessageType(str, Enum):
    USER = "user"
    COPILOT = "copilot"


@dataclass
class ChatMessage:
    type: MessageType | str
    text: str


@dataclass
class ToolDeclaration:
    name: str
    description: str
    parameters: dict | None = None

    @classmethod
    def from_dict(cls, raw: dict) -> ToolDeclaration:
        if not isinstance(raw, Mapping):
            raise TypeError(f"tool declaration must be an object, got {type(raw).__name__}")
        return cls(
            name=raw["name"],
            description=raw.get("description", ""),
            parameters=raw.get("parameters"),
        )


@dataclass
class SendMessageParams:
    """A single streaming request.

    ``context_data`` maps tool names to results fetched ahead of time by the
    caller; they are injected into the prompt as completed tool calls.
    """

    user_id: str
    text: str
    conversation_history: list[ChatMessage] = field(default_factory=list)
    system_prompt: str | None = None
    tools: list[ToolDeclaration] | None = None
    context_data: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, raw: dict) -> SendMessageParams:
        """Build params from a JSON payload (camelCase or snake_case keys)."""

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in raw:
                    return raw[key]
            return None

        history = [
            m if isinstance(m, ChatMessage) else ChatMessage(type=m["type"], text=m["text"])
            for m in pick("conversation_history", "conversationHistory") or []
        ]
        tools = pick("tools")
        return cls(
            user_id=pick("user_id", "userId") or "",
            text=raw["text"],
            conversation_history=history,
            system_prompt=pick("system_prompt", "systemPrompt"),
            tools=[
                t if isinstance(t, ToolDeclaration) else ToolDeclaration.from_dict(t)
                for t in tools
            ]
            if tools is not None
            else None,
            context_data=pick("context_data", "contextData"),
        )
