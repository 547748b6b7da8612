"""
PTTJS Scheduling - one algorithm, two ways to run it.

Scanning, row parsing and row rendering are written once as step generators:
they `yield` at each batch boundary and `return` their result. A driver decides
what a yield means:

  - run_direct():       ignore yields, run to completion (no event loop needed)
  - run_cooperative():  await asyncio.sleep(0) at every yield, so a long parse
                        does not starve other tasks on the same event loop
"""

from __future__ import annotations

import asyncio
from typing import Generator, Iterator, TypeVar

T = TypeVar("T")

Steps = Generator[None, None, T]


def batches(total: int, batch_size: int | None) -> Iterator[tuple[int, int]]:
    """Yield (start, end) ranges covering range(total). None means one batch."""
    if total <= 0:
        return
    if not batch_size or batch_size <= 0:
        batch_size = total
    for start in range(0, total, batch_size):
        yield start, min(start + batch_size, total)


def run_direct(steps: Steps[T]) -> T:
    """Drive a step generator to completion without yielding control."""
    while True:
        try:
            next(steps)
        except StopIteration as done:
            return done.value


async def run_cooperative(steps: Steps[T]) -> T:
    """Drive a step generator, handing control to the event loop at every step."""
    while True:
        try:
            next(steps)
        except StopIteration as done:
            return done.value
        await asyncio.sleep(0)
