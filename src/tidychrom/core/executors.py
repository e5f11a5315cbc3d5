"""Utilities to process the channels of a trace sequentially or in parallel."""

from __future__ import annotations

import concurrent.futures
from logging import getLogger
from typing import Callable, Protocol, Sequence, TypeVar

import pydantic

logger = getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class ChannelExecutor(Protocol):
    """Base channel executor class."""

    def map(self, func: Callable[[T], R], channels: Sequence[T]) -> list[R]:
        """Apply a function to each channel and return the results in channel order."""
        ...


class SequentialChannelExecutor:
    """Process channels one at a time."""

    def map(self, func: Callable[[T], R], channels: Sequence[T]) -> list[R]:
        """Apply a function to each channel and return the results in channel order."""
        n_channels = len(channels)
        results = list()
        for k, channel in enumerate(channels):
            logger.debug(f"Processing channel {k + 1}/{n_channels}.")
            results.append(func(channel))
        return results


class ParallelChannelExecutor(pydantic.BaseModel):
    """Process channels concurrently using a thread pool.

    Channel tasks only share read-only inputs, such as the time axis or the baseline penalty
    matrix. Numpy and scipy release the GIL in the heavy numerical routines.

    """

    max_workers: pydantic.PositiveInt = 2
    """The maximum number of threads used to process channels simultaneously."""

    def map(self, func: Callable[[T], R], channels: Sequence[T]) -> list[R]:
        """Apply a function to each channel and return the results in channel order."""
        n_channels = len(channels)
        results: list[R | None] = [None] * n_channels
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(func, channel): k for k, channel in enumerate(channels)}
            for done, future in enumerate(concurrent.futures.as_completed(futures), start=1):
                results[futures[future]] = future.result()
                logger.debug(f"Processed channel {futures[future] + 1} ({done}/{n_channels}).")
        return results  # type: ignore[return-value]


def create_executor(max_workers: int | None = 1) -> ChannelExecutor:
    """Create a channel executor.

    :param max_workers: the number of workers. If set to ``1`` or ``None``, channels are processed sequentially.

    """
    if max_workers is None or max_workers == 1:
        return SequentialChannelExecutor()
    return ParallelChannelExecutor(max_workers=max_workers)
