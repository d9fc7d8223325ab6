"""
Turns per-request tool declarations into callable tools.

Every declared tool is registered, whether or not the caller pre-fetched its
data.  A tool with pre-fetched data returns that data when the model calls
it; a tool without returns an error payload telling the model the data has
to come from the calling service.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from chatstream.tools.base import Tool, normalize_schema
from chatstream.tools.validation import ParamValidator, schema_to_validator
from chatstream.types import ToolDeclaration

DEFAULT_COLLABORATOR = "Chat"


def missing_data_payload(collaborator: str = DEFAULT_COLLABORATOR) -> dict:
    return {"error": f"Data should be pre-fetched by {collaborator} Service"}


class ContextTool(Tool):
    """A tool that answers from a snapshot of pre-fetched context data."""

    def __init__(
        self,
        declaration: ToolDeclaration,
        context_data: Mapping[str, Any],
        collaborator: str = DEFAULT_COLLABORATOR,
    ) -> None:
        self._declaration = declaration
        self._context = context_data
        self._collaborator = collaborator
        self._parameters = normalize_schema(declaration.parameters)
        self._validator = schema_to_validator(declaration.parameters)

    @property
    def name(self) -> str:
        return self._declaration.name

    @property
    def description(self) -> str:
        return self._declaration.description

    @property
    def parameters(self) -> dict:
        return self._parameters

    @property
    def validator(self) -> ParamValidator:
        return self._validator

    async def execute(self, **kwargs) -> Any:
        data = self._context.get(self.name)
        if data is not None:
            return data
        return missing_data_payload(self._collaborator)


def build_tools(
    declarations: Iterable[ToolDeclaration] | None,
    context_data: Mapping[str, Any] | None = None,
    *,
    collaborator: str = DEFAULT_COLLABORATOR,
) -> dict[str, ContextTool] | None:
    """Map tool name to ``ContextTool``; ``None`` when nothing was declared."""
    if declarations is None:
        return None
    snapshot = dict(context_data or {})
    return {
        decl.name: ContextTool(decl, snapshot, collaborator)
        for decl in declarations
    }
