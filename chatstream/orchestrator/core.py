"""
Orchestrator core -- turns one chat request into a stream of text fragments.

Providers do not always deliver text where it is expected: the plain text
stream can be empty even when generation succeeded, the event stream can
carry text or an embedded error, and the final values may hang.  The
orchestrator reads in tiers, each entered only if the previous one produced
no text:

1. PRIMARY    -- the provider's text stream.
2. SECONDARY  -- the full event stream (text deltas and error events).
3. SETTLEMENT -- the final text / tool calls / finish reason, each awaited
   with a deadline, with one delayed re-read of the text when the model
   called tools but said nothing.

Any failure leaves the generator as exactly one ``ChatStreamError``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator

from chatstream.config import ChatStreamConfig
from chatstream.errors import (
    EmptyStreamError,
    NoTextAfterToolsError,
    ProviderStreamError,
    SettlementFailureError,
    SettlementTimeoutError,
    classify_error,
)
from chatstream.llm.messages import build_messages
from chatstream.llm.providers.base import Provider
from chatstream.llm.providers.openai_compat import create_provider
from chatstream.orchestrator.settlement import Outcome, is_blank, settle
from chatstream.tools.adapter import DEFAULT_COLLABORATOR, build_tools
from chatstream.types import SendMessageParams

logger = logging.getLogger(__name__)

MAX_TOOL_ROUNDS = 5
FINISH_REASON_TIMEOUT = 5.0
TEXT_TIMEOUT = 30.0
TOOL_CALLS_TIMEOUT = 30.0
TOOL_TEXT_GRACE = 1.0


class Tier(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    SETTLEMENT = "settlement"


@dataclass
class RequestShape:
    """Size of a request, embedded in every error for diagnosis."""

    messages_count: int
    tools_count: int
    context_data_keys: list[str] = field(default_factory=list)

    def describe(self) -> str:
        keys = ", ".join(self.context_data_keys) or "none"
        return (
            f"Messages: {self.messages_count}, Tools: {self.tools_count}, "
            f"ContextData keys: {keys}"
        )

    def details(self) -> dict[str, Any]:
        return {
            "messages_count": self.messages_count,
            "tools_count": self.tools_count,
            "context_data_keys": list(self.context_data_keys),
        }


def describe_finish_reason(finish_reason: str | None) -> str:
    if finish_reason is None:
        return "unknown"
    return finish_reason or '""'


class ChatStreamService:
    """
    Streams chat completions for individual requests.

    Parameters
    ----------
    config : ChatStreamConfig
        Validated once here; ``ConfigurationError`` if the endpoint or key
        is missing.
    provider : Provider, optional
        Defaults to an OpenAI-compatible provider built from *config*.
    finish_reason_timeout, text_timeout, tool_calls_timeout : float
        Deadlines (seconds) for the settlement values.
    tool_text_grace : float
        Delay before re-reading the final text after tool-only output.
    collaborator : str
        Name of the service expected to pre-fetch tool data, used in the
        payload returned by tools that have none.
    """

    def __init__(
        self,
        config: ChatStreamConfig,
        provider: Provider | None = None,
        *,
        finish_reason_timeout: float = FINISH_REASON_TIMEOUT,
        text_timeout: float = TEXT_TIMEOUT,
        tool_calls_timeout: float = TOOL_CALLS_TIMEOUT,
        tool_text_grace: float = TOOL_TEXT_GRACE,
        collaborator: str = DEFAULT_COLLABORATOR,
    ) -> None:
        config.validate()
        self._config = config
        self._provider = provider if provider is not None else create_provider(config)
        self.finish_reason_timeout = finish_reason_timeout
        self.text_timeout = text_timeout
        self.tool_calls_timeout = tool_calls_timeout
        self.tool_text_grace = tool_text_grace
        self.collaborator = collaborator

    @property
    def config(self) -> ChatStreamConfig:
        return self._config

    @property
    def provider(self) -> Provider:
        return self._provider

    async def stream_message(self, params: SendMessageParams) -> AsyncIterator[str]:
        """
        Stream the model's answer to *params* as text fragments.

        Nothing is sent to the provider until the first fragment is
        requested.  Raises a ``ChatStreamError`` subclass on failure.
        """
        messages = build_messages(
            params.conversation_history, params.text, params.context_data
        )
        tools = build_tools(
            params.tools, params.context_data, collaborator=self.collaborator
        )
        shape = RequestShape(
            messages_count=len(messages),
            tools_count=len(params.tools or []),
            context_data_keys=list(params.context_data or {}),
        )
        logger.info(
            "Streaming for user=%s model=%s (%s)",
            params.user_id, self._config.model, shape.describe(),
        )

        result = None
        tier = Tier.PRIMARY
        chunk_count = 0
        try:
            result = await self._provider.stream_text(
                model=self._config.model,
                system=params.system_prompt,
                messages=messages,
                tools=tools,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                max_tool_rounds=MAX_TOOL_ROUNDS,
            )

            async for chunk in result.text_stream:
                chunk_count += 1
                yield chunk

            if chunk_count == 0:
                tier = Tier.SECONDARY
                logger.info("Text stream was empty; reading full stream")
                stream_error = None
                async for part in result.full_stream:
                    if part.type == "error":
                        stream_error = classify_error(
                            part.error,
                            f"Provider stream error ({shape.describe()})",
                            error_cls=ProviderStreamError,
                            **shape.details(),
                        )
                        break
                    if part.type == "text-delta":
                        chunk_count += 1
                        yield part.text_delta
                if stream_error is not None:
                    raise stream_error

            if chunk_count == 0:
                tier = Tier.SETTLEMENT
                logger.info("Full stream produced no text; settling result")
                async for chunk in self._settle_result(result, shape):
                    chunk_count += 1
                    yield chunk
        except Exception as exc:
            error = classify_error(
                exc,
                f"Stream error ({shape.describe()})",
                error_cls=ProviderStreamError,
                **shape.details(),
            )
            logger.warning("Stream failed in %s tier: %s", tier.value, error)
            raise error
        finally:
            aclose = getattr(result, "aclose", None)
            if aclose is not None:
                await aclose()

        logger.debug("Stream finished in %s tier with %d chunk(s)", tier.value, chunk_count)

    # ------------------------------------------------------------------
    # Settlement tier
    # ------------------------------------------------------------------

    async def _settle_result(self, result: Any, shape: RequestShape) -> AsyncIterator[str]:
        finish_reason = await self._await_value(
            result.finish_reason, "finish_reason", self.finish_reason_timeout, shape
        )
        final_text = await self._await_value(
            result.text, "text", self.text_timeout, shape
        )
        tool_calls = await self._await_value(
            result.tool_calls, "tool_calls", self.tool_calls_timeout, shape
        ) or []
        reason = describe_finish_reason(finish_reason)

        if not is_blank(final_text):
            yield final_text
            return

        if tool_calls:
            logger.info(
                "Model called %d tool(s) without text; re-reading in %.1fs",
                len(tool_calls), self.tool_text_grace,
            )
            await asyncio.sleep(self.tool_text_grace)
            retry = await settle(result.text, self.text_timeout)
            if retry.ok and not is_blank(retry.value):
                yield retry.value
                return

            message = (
                "Model called tools but did not generate text. "
                f"ToolCalls: {len(tool_calls)}, FinishReason: {reason}"
            )
            if retry.outcome is Outcome.REJECTED:
                message += f", Error: {retry.cause}"
            elif retry.outcome is Outcome.TIMEOUT:
                message += f", Error: text re-read timed out after {self.text_timeout:g}s"
            raise NoTextAfterToolsError(
                message,
                cause=retry.cause,
                details={
                    "tool_calls_count": len(tool_calls),
                    "finish_reason": reason,
                    **shape.details(),
                },
            )

        raise EmptyStreamError(
            "Stream completed without generating any chunks or text. "
            f"{shape.describe()}, FinishReason: {reason}, ToolCalls: {len(tool_calls)}",
            details={
                "finish_reason": reason,
                "tool_calls_count": len(tool_calls),
                **shape.details(),
            },
        )

    async def _await_value(
        self, awaitable: Any, label: str, timeout: float, shape: RequestShape
    ) -> Any:
        settled = await settle(awaitable, timeout)
        if settled.outcome is Outcome.TIMEOUT:
            raise SettlementTimeoutError(
                f"Timeout waiting for result.{label} after {timeout:g}s ({shape.describe()})",
                details={"timeout": timeout, "value": label, **shape.details()},
            )
        if settled.outcome is Outcome.REJECTED:
            raise classify_error(
                settled.cause,
                f"Result settlement could not complete while reading {label} "
                f"({shape.describe()})",
                error_cls=SettlementFailureError,
                value=label,
                **shape.details(),
            )
        return settled.value
