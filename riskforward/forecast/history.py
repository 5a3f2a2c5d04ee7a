"""Snapshot history collaborators for the forward projector.

The projector only needs ``get_latest_snapshot`` and ``get_risk_history``
(the ``HistoryLookup`` protocol). Two implementations ship here:

- ``SnapshotHistory``: in-memory, per-risk, capped FIFO store that records
  momentum on every append.
- ``ScoreHistoryLookup``: read-only adapter over ``Risk.score_history``.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional, Protocol, Sequence

from riskforward.forecast.momentum import MAX_POINTS_FOR_MOMENTUM, compute_momentum
from riskforward.models import Risk, RiskSnapshot

logger = logging.getLogger(__name__)

DEFAULT_MAX_SNAPSHOTS = 10


class HistoryLookup(Protocol):
    def get_latest_snapshot(self, risk_id: str) -> Optional[RiskSnapshot]: ...

    def get_risk_history(self, risk_id: str) -> list[RiskSnapshot]: ...


class SnapshotHistory:
    """Append-only snapshot store, newest last, ``max_snapshots`` per risk."""

    def __init__(self, max_snapshots: int = DEFAULT_MAX_SNAPSHOTS):
        if max_snapshots < 1:
            raise ValueError("max_snapshots must be >= 1")
        self.max_snapshots = max_snapshots
        self._store: dict[str, list[RiskSnapshot]] = {}
        self._lock = threading.Lock()

    def add_snapshot(self, risk_id: str, snapshot: RiskSnapshot) -> RiskSnapshot:
        """Append ``snapshot`` under ``risk_id`` and return the stored copy.

        The stored copy carries ``risk_id`` and the momentum computed from the
        last five snapshots including this one. The oldest snapshot is evicted
        once the cap is exceeded.
        """
        with self._lock:
            existing = self._store.get(risk_id, [])
            tagged = snapshot.model_copy(update={"risk_id": risk_id})
            window = (existing + [tagged])[-MAX_POINTS_FOR_MOMENTUM:]
            stored = tagged.model_copy(
                update={"momentum": compute_momentum(window).momentum_per_cycle}
            )
            updated = (existing + [stored])[-self.max_snapshots:]
            evicted = len(existing) + 1 - len(updated)
            self._store[risk_id] = updated

        if evicted:
            logger.debug("Evicted %d snapshot(s) for %s", evicted, risk_id)
        return stored

    def get_risk_history(self, risk_id: str) -> list[RiskSnapshot]:
        with self._lock:
            return list(self._store.get(risk_id, []))

    def get_latest_snapshot(self, risk_id: str) -> Optional[RiskSnapshot]:
        with self._lock:
            snapshots = self._store.get(risk_id)
            return snapshots[-1] if snapshots else None

    def risk_ids(self) -> list[str]:
        with self._lock:
            return list(self._store)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(v) for v in self._store.values())


class ScoreHistoryLookup:
    """Expose each risk's ``score_history`` as snapshots (cycle index = position)."""

    def __init__(self, histories: dict[str, list[RiskSnapshot]]):
        self._histories = histories

    @classmethod
    def from_risks(cls, risks: Iterable[Risk]) -> "ScoreHistoryLookup":
        histories = {}
        for risk in risks:
            histories[risk.id] = [
                RiskSnapshot(
                    risk_id=risk.id,
                    cycle_index=i,
                    timestamp=str(entry.timestamp),
                    composite_score=entry.composite_score,
                )
                for i, entry in enumerate(risk.score_history)
            ]
        return cls(histories)

    def get_risk_history(self, risk_id: str) -> list[RiskSnapshot]:
        return list(self._histories.get(risk_id, []))

    def get_latest_snapshot(self, risk_id: str) -> Optional[RiskSnapshot]:
        history = self._histories.get(risk_id)
        return history[-1] if history else None


def load_snapshots(history: SnapshotHistory, snapshots: Sequence[RiskSnapshot]) -> SnapshotHistory:
    """Replay ``snapshots`` (oldest first) into ``history``."""
    for snapshot in snapshots:
        history.add_snapshot(snapshot.risk_id, snapshot)
    return history
