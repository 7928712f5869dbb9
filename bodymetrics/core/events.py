from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from bodymetrics.core.measurements import MeasurementVector
from bodymetrics.core.skeleton import Skeleton


@dataclass
class SkeletonFrame:
    timestamp: float
    bodies: List[Skeleton] = field(default_factory=list)


@dataclass
class MeasurementEvent:
    timestamp: float
    tracking_id: str
    measurement: MeasurementVector


@dataclass
class IdentityEvent:
    timestamp: float
    tracking_id: str
    status: str
    subject_id: Optional[str]
    distance: Optional[float]
    count: int


class EventBus:
    def __init__(self):
        self._subs: Dict[str, List[Callable]] = {}

    def subscribe(self, event_name: str, callback: Callable) -> None:
        self._subs.setdefault(event_name, []).append(callback)

    def publish(self, event_name: str, payload) -> None:
        for callback in list(self._subs.get(event_name, [])):
            callback(payload)
