from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Sequence

import numpy as np

from bodymetrics.core.constants import (
    KINECT_JOINTS,
    NOT_TRACKED,
    SKELETON_BONES,
    TRACKED,
    TRACKING_STATES,
)
from bodymetrics.exceptions import MalformedStateError


@dataclass(frozen=True, eq=False)
class Joint:
    name: str
    xyz: np.ndarray
    state: str = TRACKED


@dataclass
class Skeleton:
    tracking_id: str
    joints: Dict[str, Joint] = field(default_factory=dict)
    is_tracked: bool = True

    def joint(self, name: str) -> Joint:
        # Absent joints read as untracked at the origin, like a freshly allocated sensor body.
        found = self.joints.get(name)
        if found is not None:
            return found
        return Joint(name=name, xyz=np.zeros(3, dtype=float), state=NOT_TRACKED)

    def chain(self, names: Iterable[str]) -> list[Joint]:
        return [self.joint(name) for name in names]


def joint_distance(a: Joint, b: Joint) -> float:
    return float(np.linalg.norm(np.asarray(a.xyz, dtype=float) - np.asarray(b.xyz, dtype=float)))


def chain_length(joints: Sequence[Joint]) -> float:
    length = 0.0
    for idx in range(len(joints) - 1):
        length += joint_distance(joints[idx], joints[idx + 1])
    return length


def count_tracked(joints: Iterable[Joint]) -> int:
    return sum(1 for joint in joints if joint.state == TRACKED)


def bone_lengths(skeleton: Skeleton) -> Dict[tuple[str, str], float]:
    return {
        (a, b): joint_distance(skeleton.joint(a), skeleton.joint(b))
        for a, b in SKELETON_BONES
    }


def first_tracked(skeletons: Iterable[Skeleton]) -> Optional[Skeleton]:
    for skeleton in skeletons:
        if skeleton.is_tracked:
            return skeleton
    return None


def _parse_joint(name: str, entry) -> Joint:
    if name not in KINECT_JOINTS:
        raise MalformedStateError(f"unknown joint label: {name}")
    if not isinstance(entry, dict):
        raise MalformedStateError(f"joint {name} must be an object")
    state = str(entry.get("state", TRACKED))
    if state not in TRACKING_STATES:
        raise MalformedStateError(f"joint {name} has unknown tracking state: {state}")
    try:
        xyz = np.array(entry.get("xyz", [0.0, 0.0, 0.0]), dtype=float).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise MalformedStateError(f"joint {name} position is not numeric") from exc
    if xyz.shape != (3,):
        raise MalformedStateError(f"joint {name} position must have 3 components")
    return Joint(name=name, xyz=xyz, state=state)


def skeleton_from_payload(payload: dict) -> Skeleton:
    if not isinstance(payload, dict):
        raise MalformedStateError("skeleton payload must be an object")
    if "tracking_id" not in payload:
        raise MalformedStateError("skeleton payload is missing tracking_id")
    joints_payload = payload.get("joints", {}) or {}
    if not isinstance(joints_payload, dict):
        raise MalformedStateError("skeleton joints must be an object")
    joints = {
        str(name): _parse_joint(str(name), entry)
        for name, entry in joints_payload.items()
    }
    return Skeleton(
        tracking_id=str(payload["tracking_id"]),
        joints=joints,
        is_tracked=bool(payload.get("is_tracked", True)),
    )


def skeleton_to_payload(skeleton: Skeleton) -> dict:
    return {
        "tracking_id": skeleton.tracking_id,
        "is_tracked": bool(skeleton.is_tracked),
        "joints": {
            name: {
                "xyz": [float(joint.xyz[0]), float(joint.xyz[1]), float(joint.xyz[2])],
                "state": joint.state,
            }
            for name, joint in skeleton.joints.items()
        },
    }
