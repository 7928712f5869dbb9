from __future__ import annotations

import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Optional

from bodymetrics.core.events import EventBus, IdentityEvent, MeasurementEvent, SkeletonFrame
from bodymetrics.core.gaze import GazeTarget, gaze_target
from bodymetrics.core.measurements import MeasurementVector, extract_measurements, limb_sides
from bodymetrics.core.osc import IdentityOscSink
from bodymetrics.exceptions import BodyMetricsError, CollaboratorUnavailableError
from bodymetrics.logging_config import get_logger
from bodymetrics.models.config import AppConfig
from bodymetrics.services.identity_matcher import IdentityMatcher, ObservationResult

logger = get_logger(__name__)


@dataclass
class BodyResult:
    tracking_id: str
    measurement: MeasurementVector
    arm_side: str
    leg_side: str
    observation: ObservationResult

    def as_dict(self) -> dict:
        return {
            "tracking_id": self.tracking_id,
            "measurement": self.measurement.as_dict(),
            "arm_side": self.arm_side,
            "leg_side": self.leg_side,
            "observation": self.observation.as_dict(),
        }


@dataclass
class FrameResult:
    timestamp: float
    bodies: list[BodyResult] = field(default_factory=list)
    gaze: Optional[GazeTarget] = None

    def as_dict(self) -> dict:
        return {
            "timestamp": float(self.timestamp),
            "bodies": [item.as_dict() for item in self.bodies],
            "gaze": self.gaze.as_dict() if self.gaze else None,
        }


@dataclass
class ProcessorState:
    running: bool = False
    message: str = "idle"
    frames_processed: int = 0
    frames_dropped: int = 0
    frames_failed: int = 0
    last_timestamp: float = 0.0
    last_result: dict = field(default_factory=dict)


class FrameProcessor:
    """Single consumer of inbound skeleton frames.

    Frames submitted from any thread are queued and handled by one worker,
    so the identity stores only ever see one writer.
    """

    def __init__(
        self,
        cfg: AppConfig,
        matcher: IdentityMatcher,
        event_bus: EventBus,
        osc_sink: Optional[IdentityOscSink] = None,
    ):
        self.cfg = cfg
        self.matcher = matcher
        self.event_bus = event_bus
        self.osc_sink = osc_sink
        self.state = ProcessorState()
        self._queue: queue.Queue = queue.Queue(maxsize=max(1, int(cfg.processing.queue_size)))
        self._thread: Optional[threading.Thread] = None
        self._stop_evt = threading.Event()
        self._lock = threading.Lock()

    def process_frame(self, frame: SkeletonFrame) -> FrameResult:
        result = FrameResult(timestamp=float(frame.timestamp), gaze=gaze_target(frame.bodies))
        for body in frame.bodies:
            if not body.is_tracked:
                continue
            measurement = extract_measurements(
                body,
                head_divergence=self.cfg.measurement.head_divergence_m,
                neck_joint=self.cfg.measurement.neck_joint,
            )
            sides = limb_sides(body)
            observation = self.matcher.observe(body.tracking_id, measurement)
            result.bodies.append(
                BodyResult(
                    tracking_id=body.tracking_id,
                    measurement=measurement,
                    arm_side=sides.arm,
                    leg_side=sides.leg,
                    observation=observation,
                )
            )
            self._emit(frame.timestamp, body.tracking_id, measurement, observation)

        self.state.frames_processed += 1
        self.state.last_timestamp = float(frame.timestamp)
        self.state.last_result = result.as_dict()
        return result

    def _emit(
        self,
        timestamp: float,
        tracking_id: str,
        measurement: MeasurementVector,
        observation: ObservationResult,
    ) -> None:
        self.event_bus.publish(
            "measurement",
            MeasurementEvent(timestamp=timestamp, tracking_id=tracking_id, measurement=measurement),
        )
        self.event_bus.publish(
            "identity",
            IdentityEvent(
                timestamp=timestamp,
                tracking_id=tracking_id,
                status=observation.status,
                subject_id=observation.subject_id,
                distance=observation.distance,
                count=observation.count,
            ),
        )
        if self.osc_sink is None:
            return
        try:
            self.osc_sink.send_measurement(tracking_id, measurement)
            if observation.subject_id is not None:
                self.osc_sink.send_identity(
                    observation.subject_id, observation.status, observation.distance
                )
        except OSError as exc:
            raise CollaboratorUnavailableError(f"osc sink unavailable: {exc}") from exc

    def submit(self, frame: SkeletonFrame) -> bool:
        if not self.state.running:
            return False
        try:
            self._queue.put_nowait(frame)
        except queue.Full:
            # Newest frame wins; drop the oldest queued one.
            try:
                self._queue.get_nowait()
                self.state.frames_dropped += 1
            except queue.Empty:
                pass
            self._queue.put_nowait(frame)
        return True

    def start(self) -> dict:
        with self._lock:
            if self.state.running:
                return {"ok": True, "message": "already_running"}
            self._stop_evt.clear()
            self._thread = threading.Thread(target=self._run_loop, daemon=True)
            self.state.running = True
            self.state.message = "running"
            self._thread.start()
        logger.info("Frame processor started")
        return {"ok": True, "message": "started"}

    def stop(self) -> dict:
        with self._lock:
            if not self.state.running:
                return {"ok": True, "message": "already_stopped"}
            self._stop_evt.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout=self.cfg.processing.stop_timeout_s)
            if thread.is_alive():
                # The worker is still inside a frame; it clears running itself on exit.
                logger.warning("Frame processor did not stop within %.1f s", self.cfg.processing.stop_timeout_s)
                with self._lock:
                    self.state.message = "stopping"
                return {"ok": False, "message": "stop_timeout"}
        with self._lock:
            self.state.running = False
            self.state.message = "stopped"
        logger.info("Frame processor stopped")
        return {"ok": True, "message": "stopped"}

    def status(self) -> dict:
        return {
            "running": self.state.running,
            "message": self.state.message,
            "frames_processed": self.state.frames_processed,
            "frames_dropped": self.state.frames_dropped,
            "frames_failed": self.state.frames_failed,
            "queued": self._queue.qsize(),
            "last_timestamp": self.state.last_timestamp,
            "last_result": self.state.last_result,
        }

    def _run_loop(self) -> None:
        try:
            while not self._stop_evt.is_set():
                try:
                    frame = self._queue.get(timeout=self.cfg.processing.idle_poll_s)
                except queue.Empty:
                    continue
                t0 = time.time()
                try:
                    self.process_frame(frame)
                except CollaboratorUnavailableError:
                    raise
                except (BodyMetricsError, OSError) as exc:
                    self.state.frames_failed += 1
                    logger.warning("Dropped frame at %.3f: %s", frame.timestamp, exc)
                    continue
                logger.debug("Frame %.3f processed in %.1f ms", frame.timestamp, (time.time() - t0) * 1000.0)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Frame processor stopped on error")
            self.state.message = f"error: {exc}"
        finally:
            self.state.running = False
