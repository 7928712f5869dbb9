from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

import numpy as np

from bodymetrics.core.measurements import MeasurementVector
from bodymetrics.logging_config import get_logger
from bodymetrics.services.identity_store import IdentityRecord, IdentityStore

logger = get_logger(__name__)

ACCUMULATING = "accumulating"
RECOGNIZED = "recognized"
ENROLLED = "enrolled"
REJECTED = "rejected"


@dataclass(frozen=True)
class Recognized:
    subject_id: str
    distance: float


@dataclass(frozen=True)
class Unrecognized:
    nearest_distance: Optional[float] = None


Identity = Union[Recognized, Unrecognized]


@dataclass
class ObservationResult:
    session_id: str
    status: str
    count: int
    values: tuple[float, ...]
    subject_id: Optional[str] = None
    distance: Optional[float] = None

    def as_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "status": self.status,
            "count": int(self.count),
            "values": [float(v) for v in self.values],
            "subject_id": self.subject_id,
            "distance": self.distance,
        }


def running_mean(old: Sequence[float], new: Sequence[float], count: int) -> tuple[float, ...]:
    if count <= 0:
        return tuple(float(v) for v in new)
    old_arr = np.asarray(old, dtype=float)
    new_arr = np.asarray(new, dtype=float)
    return tuple(float(v) for v in (old_arr * (count - 1) + new_arr) / count)


def measurement_distance(a: Sequence[float], b: Sequence[float]) -> float:
    return float(np.linalg.norm(np.asarray(a, dtype=float) - np.asarray(b, dtype=float)))


def classify(
    measurement: Sequence[float],
    known_records: Iterable[IdentityRecord],
    threshold: float = 0.01,
) -> Identity:
    """Nearest-neighbour lookup of a scaled measurement against the known table.

    Accepts the nearest record only when its distance is strictly below
    ``threshold``. An empty table is always Unrecognized.
    """
    best: Optional[IdentityRecord] = None
    best_dist = float("inf")
    for record in known_records:
        dist = measurement_distance(record.values, measurement)
        if dist < best_dist:
            best_dist = dist
            best = record
    if best is None:
        return Unrecognized(nearest_distance=None)
    if best_dist < float(threshold):
        return Recognized(subject_id=best.subject_id, distance=best_dist)
    return Unrecognized(nearest_distance=best_dist)


class IdentityMatcher:
    def __init__(
        self,
        unknown_store: IdentityStore,
        known_store: IdentityStore,
        scale: float = 1000.0,
        min_observations: int = 100,
        match_threshold: float = 0.01,
        max_sessions: int = 1024,
    ):
        self.unknown_store = unknown_store
        self.known_store = known_store
        self.scale = float(scale)
        self.min_observations = int(min_observations)
        self.match_threshold = float(match_threshold)
        self.max_sessions = max(1, int(max_sessions))
        # Kinect hands out a fresh tracking id on every re-entry; oldest bindings are evicted.
        self._resolved: OrderedDict[str, tuple[str, str, Optional[float]]] = OrderedDict()
        self._lock = threading.Lock()

    def resolved(self, session_id: str) -> Optional[str]:
        with self._lock:
            entry = self._resolved.get(session_id)
        return entry[0] if entry else None

    def reset_session(self, session_id: str) -> None:
        with self._lock:
            self._resolved.pop(session_id, None)

    def reconfigure(
        self,
        *,
        scale: float,
        min_observations: int,
        match_threshold: float,
        max_sessions: int,
    ) -> None:
        with self._lock:
            self.scale = float(scale)
            self.min_observations = int(min_observations)
            self.match_threshold = float(match_threshold)
            self.max_sessions = max(1, int(max_sessions))
            self._evict_locked()

    def replace_stores(self, unknown_store: IdentityStore, known_store: IdentityStore) -> None:
        with self._lock:
            self.unknown_store = unknown_store
            self.known_store = known_store

    def _bind_locked(self, session_id: str, entry: tuple[str, str, Optional[float]]) -> None:
        self._resolved[session_id] = entry
        self._resolved.move_to_end(session_id)
        self._evict_locked()

    def _evict_locked(self) -> None:
        while len(self._resolved) > self.max_sessions:
            self._resolved.popitem(last=False)

    def classify(self, measurement: MeasurementVector) -> Identity:
        return classify(
            measurement.scaled(self.scale),
            self.known_store.load(),
            self.match_threshold,
        )

    def observe(self, session_id: str, measurement: MeasurementVector) -> ObservationResult:
        scaled = measurement.scaled(self.scale)
        if not measurement.is_complete():
            logger.debug("Skipping degenerate measurement for session %s", session_id)
            return ObservationResult(session_id, REJECTED, 0, scaled)

        with self._lock:
            record = self.unknown_store.get(session_id)
            if record is None:
                record = IdentityRecord(subject_id=session_id, values=scaled, count=0)
            else:
                count = record.count + 1
                record = IdentityRecord(
                    subject_id=session_id,
                    values=running_mean(record.values, scaled, count),
                    count=count,
                )
            self.unknown_store.upsert(record)

            resolved = self._resolved.get(session_id)
            if resolved is not None:
                self._resolved.move_to_end(session_id)
                subject_id, status, distance = resolved
                return ObservationResult(
                    session_id, status, record.count, record.values, subject_id, distance
                )

            if record.count <= self.min_observations:
                return ObservationResult(session_id, ACCUMULATING, record.count, record.values)

            identity = classify(record.values, self.known_store.load(), self.match_threshold)
            if isinstance(identity, Recognized):
                logger.info(
                    "Session %s recognized as %s (distance=%.5f)",
                    session_id,
                    identity.subject_id,
                    identity.distance,
                )
                self._bind_locked(session_id, (identity.subject_id, RECOGNIZED, identity.distance))
                return ObservationResult(
                    session_id,
                    RECOGNIZED,
                    record.count,
                    record.values,
                    identity.subject_id,
                    identity.distance,
                )

            self.known_store.append(
                IdentityRecord(subject_id=session_id, values=record.values, count=record.count)
            )
            logger.info(
                "Session %s enrolled as a new known identity (nearest=%s)",
                session_id,
                identity.nearest_distance,
            )
            self._bind_locked(session_id, (session_id, ENROLLED, identity.nearest_distance))
            return ObservationResult(
                session_id,
                ENROLLED,
                record.count,
                record.values,
                session_id,
                identity.nearest_distance,
            )
