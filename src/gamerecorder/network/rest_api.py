"""REST API — FastAPI application for browsing recordings.

Endpoints:

- ``GET /api/recordings``                 list available logs
- ``GET /api/recordings/{name}``          header + keyframe statistics
- ``GET /api/recordings/{name}/frame?t=`` interpolated entities at time t

Usage::

    from gamerecorder.network.rest_api import create_app

    app = create_app(config)
    # Serve with uvicorn
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from gamerecorder.engine.replay_engine import ReplayEngine
from gamerecorder.loaders.recorder_config_loader import RecorderConfig
from gamerecorder.models.live import GenericShape, LiveEntity
from gamerecorder.network.rest_models import (
    EntityView,
    FrameResponse,
    RecordingInfo,
    RecordingSummary,
)
from gamerecorder.persistence.line_store import FileLineStore

log = logging.getLogger(__name__)


def entity_view(ent: LiveEntity) -> EntityView:
    look = ent.look
    if isinstance(look, GenericShape):
        rd = look.descriptor
        return EntityView(id=ent.id, name=ent.name, x=ent.x, y=ent.y,
                          shape=rd.kind.value, w=rd.width, h=rd.height,
                          color=list(rd.color.as_tuple()))
    return EntityView(id=ent.id, name=ent.name, x=ent.x, y=ent.y)


def create_app(config: RecorderConfig | None = None,
               store: FileLineStore | None = None) -> FastAPI:
    """Factory: create and return a configured FastAPI application.

    Only files returned by ``list_recordings`` can be addressed, so a
    name can never escape the recordings directory.
    """
    config = config or RecorderConfig()
    store = store or FileLineStore(config.recordings_dir)

    app = FastAPI(title="Game Recorder", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    def _resolve(name: str) -> Path:
        for p in store.list_recordings():
            if p.name == name:
                return p
        raise HTTPException(status_code=404, detail=f"Recording not found: {name}")

    @app.get("/api/recordings", response_model=list[RecordingInfo])
    async def list_recordings() -> list[dict[str, Any]]:
        return [
            {"name": p.name, "size_bytes": p.stat().st_size}
            for p in store.list_recordings()
        ]

    @app.get("/api/recordings/{name}", response_model=RecordingSummary)
    async def recording_summary(name: str) -> dict[str, Any]:
        engine = ReplayEngine(_resolve(name), store=store)
        header = engine.header
        return {
            "name": name,
            "version": header.version if header else 0,
            "width": header.width if header else 0,
            "height": header.height if header else 0,
            "keyframes": len(engine.keyframes),
            "inputs": len(engine.inputs),
            "duration": engine.duration,
        }

    @app.get("/api/recordings/{name}/frame", response_model=FrameResponse)
    async def recording_frame(name: str, t: float = Query(0.0, ge=0.0)) -> FrameResponse:
        engine = ReplayEngine(_resolve(name), store=store)
        entities = engine.seek(t)
        return FrameResponse(
            name=name,
            t=engine.clock,
            ended=engine.ended,
            entities=[entity_view(e) for e in entities],
        )

    return app
