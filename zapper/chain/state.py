"""Chain state: ambient clock and the all-or-nothing call scope.

Every route runs inside ``Chain.atomic()``. Registered participants (the
ledger, pools, the vault) are snapshotted on entry and restored if anything
raises inside the scope, so a failed leg leaves no observable effect.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Protocol, TypeVar

import structlog

from zapper.chain.ledger import TokenLedger

logger = structlog.get_logger()


class Clock(Protocol):
    """Source of the ambient block timestamp."""

    def now(self) -> int: ...


class SystemClock:
    """Wall-clock time in whole seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, timestamp: int = 1_700_000_000) -> None:
        self._timestamp = timestamp

    def now(self) -> int:
        return self._timestamp

    def advance(self, seconds: int) -> None:
        self._timestamp += seconds

    def set(self, timestamp: int) -> None:
        self._timestamp = timestamp


class Participant(Protocol):
    """State holder whose effects are unwound when a call reverts."""

    def snapshot(self) -> Any: ...

    def restore(self, snapshot: Any) -> None: ...


P = TypeVar("P", bound=Participant)


class Chain:
    """Ledger, clock and the participants of atomic calls."""

    def __init__(self, ledger: TokenLedger, clock: Clock | None = None) -> None:
        self.ledger = ledger
        self.clock: Clock = clock if clock is not None else SystemClock()
        self._participants: list[Participant] = [ledger]

    def now(self) -> int:
        return self.clock.now()

    def register(self, participant: P) -> P:
        """Include ``participant`` in every later atomic scope."""
        if participant not in self._participants:
            self._participants.append(participant)
        return participant

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Run the body as one call: on any exception, restore every participant and re-raise."""
        snapshots = [(p, p.snapshot()) for p in self._participants]
        try:
            yield
        except Exception as e:
            for participant, snap in reversed(snapshots):
                participant.restore(snap)
            logger.debug("chain_reverted", error=type(e).__name__, reason=str(e))
            raise
