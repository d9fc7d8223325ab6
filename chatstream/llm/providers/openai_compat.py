"""
OpenAI-compatible chat-completion provider.

Works with any endpoint that speaks the OpenAI ``/v1/chat/completions`` wire
protocol -- OpenAI itself, Azure OpenAI, vLLM, LM Studio, LocalAI, etc.

Dependencies: ``httpx`` (async HTTP client).  No ``openai`` SDK needed.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Mapping

import httpx

from chatstream.config import ChatStreamConfig
from chatstream.llm.providers.base import Provider
from chatstream.llm.stream_result import StreamResult
from chatstream.llm.tool_call_assembler import ToolCallAssembler
from chatstream.llm.types import Message, RawToolDelta, StepResult, StreamPart, ToolCall
from chatstream.tools.base import Tool

logger = logging.getLogger(__name__)


class OpenAICompatProvider(Provider):
    """
    Stream-capable provider for any OpenAI-API-compatible endpoint.

    Parameters
    ----------
    url:
        Base URL of the API, e.g. ``"https://api.openai.com/v1"`` or
        ``"http://localhost:8080/v1"``.
    api_key:
        Bearer token.  Pass ``""`` for unauthenticated local endpoints.
    timeout:
        HTTP request timeout in seconds.
    transport:
        Optional ``httpx`` transport, used by tests to serve canned SSE.
    """

    def __init__(
        self,
        url: str = "https://api.openai.com/v1",
        api_key: str = "",
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        return "openai-compat"

    async def stream_text(
        self,
        *,
        model: str,
        messages: list[Message],
        system: str | None = None,
        tools: Mapping[str, Tool] | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        max_tool_rounds: int = 5,
    ) -> StreamResult:
        return StreamResult(
            self._generate(
                model=model,
                wire_messages=self._wire_messages(messages, system),
                tools=tools or {},
                max_tokens=max_tokens,
                temperature=temperature,
                max_tool_rounds=max(1, max_tool_rounds),
            )
        )

    # ------------------------------------------------------------------
    # Request building
    # ------------------------------------------------------------------

    def _build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    @staticmethod
    def _wire_tool_calls(calls: list[ToolCall]) -> list[dict]:
        return [
            {
                "id": tc.id,
                "type": "function",
                "function": {
                    "name": tc.name,
                    "arguments": json.dumps(tc.arguments),
                },
            }
            for tc in calls
        ]

    def _wire_messages(self, messages: list[Message], system: str | None) -> list[dict]:
        wire: list[dict] = []
        if system:
            wire.append({"role": "system", "content": system})
        for msg in messages:
            m: dict = {"role": msg.role, "content": msg.content}
            if msg.tool_calls:
                m["tool_calls"] = self._wire_tool_calls(msg.tool_calls)
                m["content"] = msg.content or None
            if msg.tool_call_id:
                m["tool_call_id"] = msg.tool_call_id
            wire.append(m)
        return wire

    def _build_body(
        self,
        model: str,
        wire_messages: list[dict],
        tool_schemas: list[dict] | None,
        max_tokens: int | None,
        temperature: float | None,
    ) -> dict:
        body: dict = {
            "model": model,
            "messages": wire_messages,
            "stream": True,
        }
        if tool_schemas:
            body["tools"] = tool_schemas
            body["tool_choice"] = "auto"
        if max_tokens is not None:
            body["max_tokens"] = max_tokens
        if temperature is not None:
            body["temperature"] = temperature
        logger.info(
            "REQUEST: model=%s tools=%d messages=%d api_key=%s...",
            model,
            len(tool_schemas) if tool_schemas else 0,
            len(wire_messages),
            self._api_key[:4] if self._api_key else "(none)",
        )
        return body

    # ------------------------------------------------------------------
    # Generation loop
    # ------------------------------------------------------------------

    async def _generate(
        self,
        *,
        model: str,
        wire_messages: list[dict],
        tools: Mapping[str, Tool],
        max_tokens: int | None,
        temperature: float | None,
        max_tool_rounds: int,
    ) -> AsyncIterator[StreamPart]:
        """
        Run up to *max_tool_rounds* model calls, executing requested tools
        between them, and yield ``StreamPart`` objects as they happen.
        """
        tool_schemas = [t.to_openai_schema() for t in tools.values()] or None
        headers = self._build_headers()
        finish_reason: str | None = None

        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            for step in range(max_tool_rounds):
                body = self._build_body(
                    model, wire_messages, tool_schemas, max_tokens, temperature
                )
                step_result = StepResult(text="")
                async for part in self._stream_step(client, body, headers, step_result):
                    yield part
                finish_reason = step_result.finish_reason
                yield StreamPart(type="step-finish", finish_reason=finish_reason)

                if not step_result.tool_calls:
                    break

                wire_messages.append({
                    "role": "assistant",
                    "content": step_result.text or None,
                    "tool_calls": self._wire_tool_calls(step_result.tool_calls),
                })
                for call in step_result.tool_calls:
                    yield StreamPart(type="tool-call", tool_call=call)
                    result = await self._execute_tool(tools, call)
                    yield StreamPart(type="tool-result", tool_call=call, tool_result=result)
                    wire_messages.append({
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": result if isinstance(result, str) else json.dumps(result, default=str),
                    })
                logger.debug(
                    "Step %d executed %d tool call(s)", step + 1, len(step_result.tool_calls)
                )
            else:
                logger.info("Reached maximum of %d tool rounds", max_tool_rounds)

        yield StreamPart(type="finish", finish_reason=finish_reason)

    async def _execute_tool(self, tools: Mapping[str, Tool], call: ToolCall) -> Any:
        tool = tools.get(call.name)
        if tool is None:
            logger.warning("Model called unknown tool %r", call.name)
            return {"error": f"Unknown tool: {call.name}"}
        parsed = tool.validator.safe_parse(call.arguments)
        if not parsed.success:
            logger.warning("Invalid arguments for %s: %s", call.name, parsed.error)
            return {"error": f"Invalid arguments for {call.name}: {parsed.error}"}
        return await tool.execute(**parsed.data)

    # ------------------------------------------------------------------
    # Streaming request
    # ------------------------------------------------------------------

    async def _stream_step(
        self,
        client: httpx.AsyncClient,
        body: dict,
        headers: dict[str, str],
        step_result: StepResult,
    ) -> AsyncIterator[StreamPart]:
        """Stream one completion, filling *step_result* as chunks arrive."""
        url = f"{self._url}/chat/completions"
        assembler = ToolCallAssembler()

        async with client.stream("POST", url, json=body, headers=headers) as response:
            if response.status_code >= 400:
                detail = (await response.aread()).decode("utf-8", errors="replace")
                raise httpx.HTTPStatusError(
                    f"HTTP {response.status_code}: {detail[:200]}",
                    request=response.request,
                    response=response,
                )

            async for line in response.aiter_lines():
                line = line.rstrip("\r")
                if not line.startswith("data:"):
                    continue
                data_str = line[len("data:"):].strip()
                if data_str == "[DONE]":
                    break
                try:
                    data = json.loads(data_str)
                except json.JSONDecodeError:
                    logger.warning("Failed to parse SSE data: %s", data_str[:200])
                    continue

                if data.get("error"):
                    raise RuntimeError(f"Provider error: {_error_text(data['error'])}")

                text_delta = self._apply_chunk(data, assembler, step_result)
                if text_delta:
                    step_result.text += text_delta
                    yield StreamPart(type="text-delta", text_delta=text_delta)

        step_result.tool_calls = assembler.finish()
        for err in assembler.errors:
            logger.warning("Tool-call assembly error: %s", err)

    @staticmethod
    def _apply_chunk(
        data: dict, assembler: ToolCallAssembler, step_result: StepResult
    ) -> str:
        """Feed one SSE payload into *assembler*; return its text delta."""
        choices = data.get("choices")
        if not choices:
            return ""

        choice = choices[0]
        delta = choice.get("delta") or {}
        if choice.get("finish_reason"):
            step_result.finish_reason = choice["finish_reason"]

        for raw_tc in delta.get("tool_calls") or []:
            func = raw_tc.get("function") or {}
            assembler.feed(
                RawToolDelta(
                    call_index=raw_tc.get("index", 0),
                    id=raw_tc.get("id"),
                    name_delta=func.get("name") or "",
                    args_delta=func.get("arguments") or "",
                )
            )

        return delta.get("content") or ""


def _error_text(error: Any) -> str:
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return str(error)


def create_provider(config: ChatStreamConfig) -> OpenAICompatProvider:
    """Build the default provider for a validated configuration."""
    return OpenAICompatProvider(
        url=config.base_url,
        api_key=config.api_key,
        timeout=float(config.timeout_seconds),
    )
