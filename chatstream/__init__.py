"""chatstream -- streaming chat completions with tiered fallbacks."""

from chatstream.config import ChatStreamConfig, load_config
from chatstream.errors import (
    ChatStreamError,
    ConfigurationError,
    EmptyStreamError,
    NoTextAfterToolsError,
    ProviderStreamError,
    SettlementFailureError,
    SettlementTimeoutError,
    classify_error,
)
from chatstream.orchestrator.core import ChatStreamService
from chatstream.types import ChatMessage, MessageType, SendMessageParams, ToolDeclaration

__version__ = "0.1.0"

__all__ = [
    "ChatMessage",
    "ChatStreamConfig",
    "ChatStreamError",
    "ChatStreamService",
    "ConfigurationError",
    "EmptyStreamError",
    "MessageType",
    "NoTextAfterToolsError",
    "ProviderStreamError",
    "SendMessageParams",
    "SettlementFailureError",
    "SettlementTimeoutError",
    "ToolDeclaration",
    "classify_error",
    "load_config",
]
