from __future__ import annotations

import os
from pathlib import Path

from fastapi import FastAPI

from bodymetrics.api.rest import router as rest_router
from bodymetrics.api.ws import router as ws_router
from bodymetrics.services.runtime import build_runtime


def create_app(config_path: Path | None = None) -> FastAPI:
    app = FastAPI(title="Body Metrics Service", version="0.1.0")
    if config_path is None:
        config_path = Path(os.getenv("BODYMETRICS_CONFIG", "configs/default.yaml"))
    app.state.runtime = build_runtime(config_path)
    app.include_router(rest_router)
    app.include_router(ws_router)
    return app


app = create_app()
