from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Protocol, TypeVar

from kings_mirror.domain.exceptions import ClientDisconnectedError

T = TypeVar("T")

DEFAULT_POLL_INTERVAL_SECONDS = 0.25


class DisconnectAware(Protocol):
    async def is_disconnected(self) -> bool: ...


async def run_until_disconnected(
    request: DisconnectAware,
    awaitable: Awaitable[T],
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
) -> T:
    """
    Await `awaitable`, cancelling it if the inbound client goes away first.

    The client is polled every `poll_interval` seconds while the work is in
    flight. Raises ClientDisconnectedError after cancelling the work.
    """

    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if task in done:
                return task.result()
            if await request.is_disconnected():
                raise ClientDisconnectedError()
    finally:
        if not task.done():
            task.cancel()
