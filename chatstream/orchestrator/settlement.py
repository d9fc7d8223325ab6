"""Bounded waits on a provider's settlement values, as tagged outcomes."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable


class Outcome(str, Enum):
    OK = "ok"
    TIMEOUT = "timeout"
    REJECTED = "rejected"


@dataclass
class Settled:
    outcome: Outcome
    value: Any = None
    cause: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK


async def settle(awaitable: Awaitable[Any], timeout: float) -> Settled:
    """
    Wait at most *timeout* seconds for *awaitable*.

    On timeout the pending awaitable is cancelled and abandoned.  Exceptions
    are captured rather than raised; cancellation of the caller propagates.
    """
    try:
        value = await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        return Settled(Outcome.TIMEOUT)
    except Exception as exc:
        return Settled(Outcome.REJECTED, cause=exc)
    return Settled(Outcome.OK, value=value)


def is_blank(text: Any) -> bool:
    return not text or not str(text).strip()
