from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from bodymetrics.core.constants import HEAD_DIVERGENCE_M, KINECT_JOINTS


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    token: str = "change-me"


class MeasurementConfig(BaseModel):
    head_divergence_m: float = HEAD_DIVERGENCE_M
    # spine_shoulder anchors the shoulder and torso chains at the collarbone joint instead.
    neck_joint: str = "neck"

    @field_validator("neck_joint")
    @classmethod
    def _validate_neck_joint(cls, value: str) -> str:
        if value not in KINECT_JOINTS:
            raise ValueError(f"unknown joint label: {value}")
        return value


class IdentityConfig(BaseModel):
    unknown_path: str = "data/identities/unknownPeople.csv"
    known_path: str = "data/identities/knownPeople.csv"
    delimiter: str = ";"
    scale: float = 1000.0
    min_observations: int = 100
    match_threshold: float = 0.01
    max_tracked_sessions: int = 1024

    @field_validator("delimiter")
    @classmethod
    def _validate_delimiter(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("delimiter must be a single character")
        return value

    @field_validator("scale")
    @classmethod
    def _validate_scale(cls, value: float) -> float:
        if value <= 0.0:
            raise ValueError("scale must be positive")
        return value

    @field_validator("match_threshold")
    @classmethod
    def _validate_threshold(cls, value: float) -> float:
        if value < 0.0:
            raise ValueError("match_threshold must not be negative")
        return value

    @field_validator("max_tracked_sessions")
    @classmethod
    def _validate_max_sessions(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_tracked_sessions must be at least 1")
        return value

    def unknown_store_path(self) -> Path:
        return Path(self.unknown_path)

    def known_store_path(self) -> Path:
        return Path(self.known_path)


class ProcessingConfig(BaseModel):
    queue_size: int = 32
    idle_poll_s: float = 0.05
    stop_timeout_s: float = 3.0


class OscConfig(BaseModel):
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 9000
    address_prefix: str = "/bodymetrics"


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class AppConfig(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    measurement: MeasurementConfig = Field(default_factory=MeasurementConfig)
    identity: IdentityConfig = Field(default_factory=IdentityConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    osc: OscConfig = Field(default_factory=OscConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def maybe_masked_dump(self, mask_token: bool = True) -> dict:
        data = self.model_dump()
        if mask_token:
            token = data["server"].get("token", "")
            if token:
                data["server"]["token"] = "*" * max(4, len(token))
        return data


class ConfigUpdate(BaseModel):
    server: Optional[ServerConfig] = None
    measurement: Optional[MeasurementConfig] = None
    identity: Optional[IdentityConfig] = None
    processing: Optional[ProcessingConfig] = None
    osc: Optional[OscConfig] = None
    logging: Optional[LoggingConfig] = None
