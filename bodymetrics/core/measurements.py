from __future__ import annotations

import math
from dataclasses import dataclass

from bodymetrics.core.constants import (
    ARM_LEFT,
    ARM_RIGHT,
    HEAD_DIVERGENCE_M,
    LEG_LEFT,
    LEG_RIGHT,
    MEASUREMENT_FIELDS,
)
from bodymetrics.core.skeleton import Skeleton, chain_length, count_tracked


@dataclass(frozen=True)
class MeasurementVector:
    height: float
    leg_length: float
    arm_length: float
    shoulder_width: float
    torso_length: float

    def as_tuple(self) -> tuple[float, float, float, float, float]:
        return (
            self.height,
            self.leg_length,
            self.arm_length,
            self.shoulder_width,
            self.torso_length,
        )

    def as_dict(self) -> dict:
        return dict(zip(MEASUREMENT_FIELDS, self.as_tuple()))

    def scaled(self, factor: float) -> tuple[float, ...]:
        return tuple(float(value) * float(factor) for value in self.as_tuple())

    def is_complete(self) -> bool:
        return all(math.isfinite(value) and value > 0.0 for value in self.as_tuple())

    @classmethod
    def from_values(cls, values) -> "MeasurementVector":
        items = [float(v) for v in values]
        if len(items) != len(MEASUREMENT_FIELDS):
            raise ValueError(f"expected {len(MEASUREMENT_FIELDS)} values, got {len(items)}")
        return cls(*items)


@dataclass(frozen=True)
class LimbSides:
    arm: str
    leg: str


def _pick_side(skeleton: Skeleton, left: tuple[str, ...], right: tuple[str, ...]) -> str:
    left_tracked = count_tracked(skeleton.chain(left))
    right_tracked = count_tracked(skeleton.chain(right))
    # Tie: right side.
    return "left" if left_tracked > right_tracked else "right"


def limb_sides(skeleton: Skeleton) -> LimbSides:
    return LimbSides(
        arm=_pick_side(skeleton, ARM_LEFT, ARM_RIGHT),
        leg=_pick_side(skeleton, LEG_LEFT, LEG_RIGHT),
    )


def extract_measurements(
    skeleton: Skeleton,
    head_divergence: float = HEAD_DIVERGENCE_M,
    neck_joint: str = "neck",
) -> MeasurementVector:
    """Estimate body dimensions from one skeleton snapshot.

    Joints that are missing or untracked still take part in the arithmetic
    with whatever position they carry, so callers should check
    ``is_complete()`` and the tracking states before trusting the result.
    """
    sides = limb_sides(skeleton)
    leg_chain = LEG_LEFT if sides.leg == "left" else LEG_RIGHT
    arm_chain = ARM_LEFT if sides.arm == "left" else ARM_RIGHT

    leg_length = chain_length(skeleton.chain(leg_chain))
    arm_length = chain_length(skeleton.chain(arm_chain))
    spine = chain_length(skeleton.chain(("head", neck_joint, "spine_mid", "spine_base")))
    shoulder_width = chain_length(
        skeleton.chain(("shoulder_left", neck_joint, "shoulder_right"))
    )
    torso_length = chain_length(skeleton.chain((neck_joint, "spine_mid", "spine_base")))

    return MeasurementVector(
        height=spine + leg_length + float(head_divergence),
        leg_length=leg_length,
        arm_length=arm_length,
        shoulder_width=shoulder_width,
        torso_length=torso_length,
    )
