"""
Deadline and cancellation handling for outbound generation calls.
"""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from src.task_parsing.errors import GenerationCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def await_with_cancellation(
    awaitable: Awaitable[T],
    timeout: Optional[float],
    cancel_event: Optional[asyncio.Event] = None
) -> T:
    """
    Await ``awaitable`` bounded by ``timeout`` and an optional cancel event.

    Args:
        awaitable: The in-flight call
        timeout: Seconds before giving up, None for no deadline
        cancel_event: Set by the caller to abandon the call early

    Returns:
        The awaited result

    Raises:
        asyncio.TimeoutError: If the deadline passes first
        GenerationCancelled: If ``cancel_event`` is set first
    """
    task = asyncio.ensure_future(awaitable)
    if cancel_event is None:
        return await asyncio.wait_for(task, timeout)

    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        done, _ = await asyncio.wait(
            {task, waiter},
            timeout=timeout,
            return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()

    if task in done:
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    if waiter in done:
        logger.info("In-flight generation call cancelled by caller")
        raise GenerationCancelled("Request cancelled by caller")
    raise asyncio.TimeoutError(f"Generation did not complete within {timeout}s")
