from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from bodymetrics.exceptions import ConfigurationError
from bodymetrics.logging_config import get_logger, set_level
from bodymetrics.models.config import AppConfig, ConfigUpdate

logger = get_logger(__name__)


class ConfigStore:
    def __init__(self, path: Path):
        self.path = Path(path)
        self.config = self._load_or_create()
        set_level(self.config.logging.level)

    def _load_or_create(self) -> AppConfig:
        if self.path.exists():
            try:
                payload = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
                return AppConfig.model_validate(payload)
            except (yaml.YAMLError, ValidationError) as exc:
                raise ConfigurationError(f"invalid config {self.path}: {exc}") from exc
        logger.info("Writing default config to %s", self.path)
        cfg = AppConfig()
        self.save(cfg)
        return cfg

    def save(self, cfg: AppConfig) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            yaml.safe_dump(cfg.model_dump(), sort_keys=False),
            encoding="utf-8",
        )
        self.config = cfg

    def update(self, update: ConfigUpdate) -> AppConfig:
        data = self.config.model_dump()
        data.update(update.model_dump(exclude_none=True))
        merged = AppConfig.model_validate(data)
        self.save(merged)
        set_level(merged.logging.level)
        return merged
