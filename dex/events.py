"""Event sinks: one-way notification channel for committed pool mutations."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from dex.models.events import LiquidityAdded, LiquidityRemoved, PoolEvent, Swap


@runtime_checkable
class EventSink(Protocol):
    """Receiver for pool events.

    publish() is called once per committed mutation, while the pool lock is
    held. Implementations may read the pool but must not mutate it.
    """

    def publish(self, event: PoolEvent) -> None: ...


class EventLog:
    """Append-only in-memory event sink."""

    def __init__(self) -> None:
        self._events: list[PoolEvent] = []

    def publish(self, event: PoolEvent) -> None:
        self._events.append(event)

    @property
    def events(self) -> tuple[PoolEvent, ...]:
        return tuple(self._events)

    def of_kind(self, kind: str) -> list[PoolEvent]:
        """Events whose `kind` discriminator matches, in emission order."""
        return [event for event in self._events if event.kind == kind]

    @property
    def swaps(self) -> list[Swap]:
        return [event for event in self._events if isinstance(event, Swap)]

    @property
    def deposits(self) -> list[LiquidityAdded]:
        return [event for event in self._events if isinstance(event, LiquidityAdded)]

    @property
    def withdrawals(self) -> list[LiquidityRemoved]:
        return [event for event in self._events if isinstance(event, LiquidityRemoved)]

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[PoolEvent]:
        return iter(tuple(self._events))


class NullSink:
    """Discards every event."""

    def publish(self, event: PoolEvent) -> None:
        pass
