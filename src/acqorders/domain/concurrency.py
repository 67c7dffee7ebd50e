"""Fan-out/fan-in helpers built on ``asyncio.TaskGroup``.

Each branch writes its outcome into its own slot of a pre-sized list, so the
join never depends on completion order. A failing branch does not cancel its
siblings: every branch runs to completion before the join returns.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Iterable


@dataclass(slots=True, frozen=True)
class Succeeded[T]:
    value: T


@dataclass(slots=True, frozen=True)
class Failed:
    error: Exception


type Outcome[T] = Succeeded[T] | Failed


async def settle[T](awaitable: Awaitable[T]) -> Outcome[T]:
    """Await ``awaitable`` and capture its result or exception."""

    try:
        return Succeeded(await awaitable)
    except Exception as exc:  # noqa: BLE001
        return Failed(exc)


async def settle_all[T](awaitables: Iterable[Awaitable[T]]) -> list[Outcome[T]]:
    """Run all ``awaitables`` concurrently; outcomes keep the input order."""

    pending = list(awaitables)
    outcomes: list[Outcome[T] | None] = [None] * len(pending)

    async def run(index: int, awaitable: Awaitable[T]) -> None:
        outcomes[index] = await settle(awaitable)

    async with asyncio.TaskGroup() as group:
        for index, awaitable in enumerate(pending):
            group.create_task(run(index, awaitable))

    return [outcome for outcome in outcomes if outcome is not None]


async def join_all[T](awaitables: Iterable[Awaitable[T]]) -> list[T]:
    """Run all ``awaitables`` concurrently and return their results in order.

    Raises the first failure (by input position) once every branch finished.
    """

    outcomes = await settle_all(awaitables)
    values: list[T] = []
    for outcome in outcomes:
        if isinstance(outcome, Failed):
            raise outcome.error
        values.append(outcome.value)
    return values


def successes[T](outcomes: Iterable[Outcome[T]]) -> list[T]:
    return [outcome.value for outcome in outcomes if isinstance(outcome, Succeeded)]
