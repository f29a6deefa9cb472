# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Microtask boundary used to debounce Store notifications.

``call_soon(callback)`` defers callback until the current synchronous turn is
over:

- inside a running asyncio event loop it is handed to ``loop.call_soon``, so
  it runs as soon as the running code yields to the loop;
- with no running loop it is queued, and runs when the host calls
  ``flush()`` at the end of its turn.

Example:
    >>> fired = []
    >>> call_soon(lambda: fired.append(1))
    >>> fired
    []
    >>> flush()
    1
    >>> fired
    [1]
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Callable

logger = logging.getLogger(__name__)

Scheduler = Callable[[Callable[[], object]], object]

_queue: deque[Callable[[], object]] = deque()


def call_soon(callback: Callable[[], object]) -> None:
    """Run callback at the next microtask boundary."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        _queue.append(callback)
        return
    loop.call_soon(callback)


def pending() -> int:
    """Number of callbacks waiting for ``flush()``."""
    return len(_queue)


def flush() -> int:
    """Run queued callbacks until the queue is empty.

    Callbacks queued while flushing run in the same flush. If a callback
    raises, the exception propagates and the remaining callbacks stay queued
    for the next flush.

    Returns:
        The number of callbacks that ran.
    """
    count = 0
    while _queue:
        callback = _queue.popleft()
        count += 1
        callback()
    if count:
        logger.debug("Flushed %d deferred callback(s)", count)
    return count
