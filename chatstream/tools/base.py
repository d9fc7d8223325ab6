from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from chatstream.tools.validation import ParamValidator, schema_to_validator


def normalize_schema(schema: dict | None) -> dict:
    s = dict(schema or {})
    s.setdefault("type", "object")
    s.setdefault("properties", {})
    return s


class Tool(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @property
    @abstractmethod
    def parameters(self) -> dict: ...

    @property
    def validator(self) -> ParamValidator:
        return schema_to_validator(self.parameters)

    @abstractmethod
    async def execute(self, **kwargs) -> Any: ...

    def to_openai_schema(self) -> dict:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": normalize_schema(self.parameters),
            },
        }
