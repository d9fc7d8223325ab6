"""
Assembles streaming tool-call deltas into complete ToolCall objects.

OpenAI-style streams spread a call over many chunks: the first carries the id
and (part of) the name, later ones append argument JSON.  Deltas are keyed by
``call_index``; ``finish()`` parses every buffer once the step has ended.
Calls whose arguments are not valid JSON are dropped and reported in
``errors``.
"""

from __future__ import annotations

import json

from chatstream.llm.types import RawToolDelta, ToolCall


class ToolCallAssembler:
    """Buffers raw tool-call deltas for a single model step."""

    def __init__(self) -> None:
        self._buf: dict[int, dict] = {}
        self.errors: list[str] = []

    def feed(self, delta: RawToolDelta) -> None:
        buf = self._buf.setdefault(
            delta.call_index, {"id": None, "name": "", "args": ""}
        )
        if delta.id and not buf["id"]:
            buf["id"] = delta.id
        buf["name"] += delta.name_delta
        buf["args"] += delta.args_delta

    def finish(self) -> list[ToolCall]:
        """Parse all buffered calls in index order and clear the buffers."""
        calls: list[ToolCall] = []
        for idx in sorted(self._buf):
            buf = self._buf[idx]
            try:
                args = json.loads(buf["args"] or "{}")
            except json.JSONDecodeError as exc:
                self.errors.append(
                    f"tool_call_json_parse_failed idx={idx} err={exc}"
                )
                continue
            if not isinstance(args, dict):
                self.errors.append(
                    f"tool_call_args_not_object idx={idx} type={type(args).__name__}"
                )
                continue
            calls.append(
                ToolCall(
                    id=buf["id"] or f"call_{idx}",
                    name=buf["name"].strip(),
                    arguments=args,
                )
            )
        self._buf.clear()
        return calls
