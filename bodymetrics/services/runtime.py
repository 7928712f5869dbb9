from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from bodymetrics.core.events import EventBus
from bodymetrics.core.osc import IdentityOscSink
from bodymetrics.logging_config import get_logger
from bodymetrics.models.config import AppConfig
from bodymetrics.services.config_store import ConfigStore
from bodymetrics.services.frame_processor import FrameProcessor
from bodymetrics.services.identity_matcher import IdentityMatcher
from bodymetrics.services.identity_store import IdentityStore

logger = get_logger(__name__)


@dataclass
class RuntimeContext:
    config_store: ConfigStore
    event_bus: EventBus
    unknown_store: IdentityStore
    known_store: IdentityStore
    matcher: IdentityMatcher
    frame_processor: FrameProcessor
    osc_sink: Optional[IdentityOscSink] = None


def build_matcher(cfg: AppConfig) -> IdentityMatcher:
    identity = cfg.identity
    return IdentityMatcher(
        unknown_store=IdentityStore(identity.unknown_store_path(), identity.delimiter),
        known_store=IdentityStore(identity.known_store_path(), identity.delimiter),
        scale=identity.scale,
        min_observations=identity.min_observations,
        match_threshold=identity.match_threshold,
        max_sessions=identity.max_tracked_sessions,
    )


def build_runtime(config_path: Path) -> RuntimeContext:
    config_store = ConfigStore(config_path)
    cfg = config_store.config
    event_bus = EventBus()
    matcher = build_matcher(cfg)
    osc_sink = IdentityOscSink(cfg.osc) if cfg.osc.enabled else None
    frame_processor = FrameProcessor(cfg, matcher, event_bus, osc_sink=osc_sink)
    return RuntimeContext(
        config_store=config_store,
        event_bus=event_bus,
        unknown_store=matcher.unknown_store,
        known_store=matcher.known_store,
        matcher=matcher,
        frame_processor=frame_processor,
        osc_sink=osc_sink,
    )


def apply_config(runtime: RuntimeContext, previous: AppConfig, cfg: AppConfig) -> None:
    """Push an accepted config into the live services.

    The matcher is kept so sessions already resolved stay bound to their
    identity; the stores are only reopened when their files change.
    """
    identity = cfg.identity
    runtime.matcher.reconfigure(
        scale=identity.scale,
        min_observations=identity.min_observations,
        match_threshold=identity.match_threshold,
        max_sessions=identity.max_tracked_sessions,
    )
    old = previous.identity
    if (
        identity.unknown_path != old.unknown_path
        or identity.known_path != old.known_path
        or identity.delimiter != old.delimiter
    ):
        logger.info(
            "Reopening identity stores at %s and %s",
            identity.unknown_path,
            identity.known_path,
        )
        runtime.matcher.replace_stores(
            IdentityStore(identity.unknown_store_path(), identity.delimiter),
            IdentityStore(identity.known_store_path(), identity.delimiter),
        )
        runtime.unknown_store = runtime.matcher.unknown_store
        runtime.known_store = runtime.matcher.known_store

    if cfg.osc != previous.osc or (cfg.osc.enabled and runtime.osc_sink is None):
        old_sink = runtime.osc_sink
        runtime.osc_sink = IdentityOscSink(cfg.osc) if cfg.osc.enabled else None
        runtime.frame_processor.osc_sink = runtime.osc_sink
        if old_sink is not None:
            old_sink.close()
        logger.info("OSC output %s", "enabled" if cfg.osc.enabled else "disabled")

    runtime.frame_processor.cfg = cfg
