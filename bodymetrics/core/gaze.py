from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from bodymetrics.core.skeleton import Skeleton, first_tracked


@dataclass
class GazeTarget:
    tracking_id: str
    x: float
    y: float
    depth: float

    def as_dict(self) -> dict:
        return {
            "tracking_id": self.tracking_id,
            "x": float(self.x),
            "y": float(self.y),
            "depth": float(self.depth),
        }


def gaze_target(skeletons: Iterable[Skeleton]) -> Optional[GazeTarget]:
    """Head position and spine-mid depth of the first tracked body, for a look-at consumer."""
    skeleton = first_tracked(skeletons)
    if skeleton is None:
        return None
    head = skeleton.joint("head").xyz
    spine_mid = skeleton.joint("spine_mid").xyz
    return GazeTarget(
        tracking_id=skeleton.tracking_id,
        x=float(head[0]),
        y=float(head[1]),
        depth=float(spine_mid[2]),
    )
