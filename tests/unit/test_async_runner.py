from __future__ import annotations

import asyncio

import pytest

from ecsmapper.async_runner import run_async
from ecsmapper.exceptions import AsyncExecutionError


async def _identity(value: int) -> int:
    await asyncio.sleep(0)
    return value


async def _fail() -> None:
    await asyncio.sleep(0)
    raise ValueError("boom")


def test_run_async_from_sync_context() -> None:
    assert run_async(_identity(7)) == 7


def test_run_async_with_running_loop() -> None:
    async def _nested() -> int:
        await asyncio.sleep(0)
        return run_async(_identity(11))

    assert asyncio.run(_nested()) == 11


def test_run_async_propagates_errors_from_sync_context() -> None:
    with pytest.raises(ValueError, match="boom"):
        run_async(_fail())


def test_run_async_wraps_errors_inside_running_loop() -> None:
    async def _nested() -> None:
        run_async(_fail())

    with pytest.raises(AsyncExecutionError, match="boom"):
        asyncio.run(_nested())
