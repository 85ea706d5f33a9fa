"""Append-only round resolution history.

The final score aggregator treats this history as its only source of
per-round truth. Entries are never mutated after they are appended, and
rounds must arrive in order.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from deliverability_simulator.errors import ResolutionOrderError
from deliverability_simulator.resolution.results import ResolutionResults


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RoundResolution:
    """One resolved round."""

    round: int
    results: ResolutionResults
    timestamp: datetime = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "round": self.round,
            "results": self.results.to_dict(),
            "timestamp": self.timestamp.isoformat(),
        }


class ResolutionHistory:
    """Ordered list of RoundResolution entries for one room.

    The first entry may be any round; every later entry must be exactly
    one round after its predecessor.
    """

    def __init__(self) -> None:
        self._entries: list[RoundResolution] = []

    @property
    def entries(self) -> tuple[RoundResolution, ...]:
        return tuple(self._entries)

    @property
    def last_round(self) -> int | None:
        if not self._entries:
            return None
        return self._entries[-1].round

    def append(self, resolution: RoundResolution) -> None:
        """Append the next round.

        Raises:
            ResolutionOrderError: If the round is not exactly one after the last.
        """
        last = self.last_round
        if last is not None and resolution.round != last + 1:
            raise ResolutionOrderError(last + 1, resolution.round)
        self._entries.append(resolution)

    def to_list(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]

    def __iter__(self) -> Iterator[RoundResolution]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
