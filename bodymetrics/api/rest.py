from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from bodymetrics.core.events import SkeletonFrame
from bodymetrics.core.measurements import MeasurementVector, extract_measurements, limb_sides
from bodymetrics.core.skeleton import skeleton_from_payload
from bodymetrics.exceptions import MalformedStateError
from bodymetrics.models.api import (
    FramePayload,
    MeasurementPayload,
    SessionActionResponse,
    SkeletonPayload,
)
from bodymetrics.models.config import ConfigUpdate
from bodymetrics.services.identity_matcher import Recognized
from bodymetrics.services.runtime import apply_config

router = APIRouter(prefix="/api")

TOKEN_COOKIE = "bodymetrics_token"
TOKEN_HEADER = "x-access-token"


def _runtime(request: Request):
    return request.app.state.runtime


def _authorized_runtime(request: Request):
    runtime = _runtime(request)
    expected = runtime.config_store.config.server.token
    token = (
        request.query_params.get("token")
        or request.cookies.get(TOKEN_COOKIE)
        or request.headers.get(TOKEN_HEADER, "")
    )
    if expected and token != expected:
        raise HTTPException(status_code=401, detail="invalid token")
    return runtime


def frame_from_payload(payload: FramePayload) -> SkeletonFrame:
    return SkeletonFrame(
        timestamp=float(payload.timestamp),
        bodies=[skeleton_from_payload(body.model_dump()) for body in payload.bodies],
    )


@router.get("/config")
def get_config(request: Request):
    runtime = _authorized_runtime(request)
    return runtime.config_store.config.maybe_masked_dump(mask_token=True)


@router.put("/config")
def put_config(request: Request, payload: ConfigUpdate):
    runtime = _authorized_runtime(request)
    previous = runtime.config_store.config
    cfg = runtime.config_store.update(payload)
    apply_config(runtime, previous, cfg)
    return cfg.maybe_masked_dump(mask_token=True)


@router.post("/measurements")
def measure(request: Request, payload: SkeletonPayload):
    runtime = _authorized_runtime(request)
    cfg = runtime.config_store.config.measurement
    try:
        skeleton = skeleton_from_payload(payload.model_dump())
    except MalformedStateError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    vector = extract_measurements(
        skeleton,
        head_divergence=cfg.head_divergence_m,
        neck_joint=cfg.neck_joint,
    )
    sides = limb_sides(skeleton)
    return {
        "tracking_id": skeleton.tracking_id,
        "measurement": vector.as_dict(),
        "complete": vector.is_complete(),
        "arm_side": sides.arm,
        "leg_side": sides.leg,
    }


@router.post("/frames")
def process_frame(request: Request, payload: FramePayload):
    runtime = _authorized_runtime(request)
    try:
        frame = frame_from_payload(payload)
        result = runtime.frame_processor.process_frame(frame)
    except MalformedStateError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return result.as_dict()


@router.post("/session/start", response_model=SessionActionResponse)
def start_session(request: Request):
    runtime = _authorized_runtime(request)
    out = runtime.frame_processor.start()
    return SessionActionResponse(**out)


@router.post("/session/stop", response_model=SessionActionResponse)
def stop_session(request: Request):
    runtime = _authorized_runtime(request)
    out = runtime.frame_processor.stop()
    return SessionActionResponse(**out)


@router.get("/session/status")
def session_status(request: Request):
    runtime = _authorized_runtime(request)
    return runtime.frame_processor.status()


@router.get("/identities/known")
def known_identities(request: Request):
    runtime = _authorized_runtime(request)
    try:
        return [record.as_dict() for record in runtime.known_store.load()]
    except MalformedStateError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/identities/unknown")
def unknown_identities(request: Request):
    runtime = _authorized_runtime(request)
    try:
        return [record.as_dict() for record in runtime.unknown_store.load()]
    except MalformedStateError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.post("/identities/classify")
def classify_measurement(request: Request, payload: MeasurementPayload):
    runtime = _authorized_runtime(request)
    vector = MeasurementVector(**payload.model_dump())
    try:
        identity = runtime.matcher.classify(vector)
    except MalformedStateError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    if isinstance(identity, Recognized):
        return {"recognized": True, "subject_id": identity.subject_id, "distance": identity.distance}
    return {"recognized": False, "subject_id": None, "distance": identity.nearest_distance}
