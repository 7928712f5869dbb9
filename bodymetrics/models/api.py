from typing import Literal

from pydantic import BaseModel, Field

TrackingStateName = Literal["not_tracked", "inferred", "tracked"]


class JointPayload(BaseModel):
    xyz: list[float] = Field(min_length=3, max_length=3)
    state: TrackingStateName = "tracked"


class SkeletonPayload(BaseModel):
    tracking_id: str
    is_tracked: bool = True
    joints: dict[str, JointPayload] = Field(default_factory=dict)


class FramePayload(BaseModel):
    timestamp: float = 0.0
    bodies: list[SkeletonPayload] = Field(default_factory=list)


class MeasurementPayload(BaseModel):
    height: float
    leg_length: float
    arm_length: float
    shoulder_width: float
    torso_length: float


class SessionActionResponse(BaseModel):
    ok: bool
    message: str
