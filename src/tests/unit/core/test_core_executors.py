import time

import pydantic
import pytest

from tidychrom.core.executors import ParallelChannelExecutor, SequentialChannelExecutor, create_executor


def square(x: int) -> int:
    return x * x


def slow_square(x: int) -> int:
    # later channels finish first
    time.sleep(0.01 * (5 - x))
    return x * x


def test_sequential_executor():
    assert SequentialChannelExecutor().map(square, [1, 2, 3]) == [1, 4, 9]


def test_parallel_executor_keeps_channel_order():
    executor = ParallelChannelExecutor(max_workers=3)
    assert executor.map(slow_square, list(range(5))) == [0, 1, 4, 9, 16]


def test_executors_with_no_channels():
    assert SequentialChannelExecutor().map(square, []) == []
    assert ParallelChannelExecutor().map(square, []) == []


def test_parallel_executor_invalid_workers_raise_ValidationError():
    with pytest.raises(pydantic.ValidationError):
        ParallelChannelExecutor(max_workers=0)


@pytest.mark.parametrize("max_workers", [None, 1])
def test_create_executor_sequential(max_workers):
    assert isinstance(create_executor(max_workers), SequentialChannelExecutor)


def test_create_executor_parallel():
    executor = create_executor(4)
    assert isinstance(executor, ParallelChannelExecutor)
    assert executor.max_workers == 4
