"""Pydantic response models for the recordings REST API."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class RecordingInfo(BaseModel):
    name: str
    size_bytes: int = 0


class RecordingSummary(BaseModel):
    name: str
    version: int = 0
    width: int = 0
    height: int = 0
    keyframes: int = 0
    inputs: int = 0
    duration: float = 0.0


class EntityView(BaseModel):
    """One live entity of a replay frame.

    ``shape`` is the generic shape kind, or ``CUSTOM`` when the client
    has to draw the entity by ``name``; ``w``/``h``/``color`` are only
    set for generic shapes.
    """

    id: str
    name: str
    x: float
    y: float
    shape: str = "CUSTOM"
    w: Optional[float] = None
    h: Optional[float] = None
    color: Optional[List[float]] = None


class FrameResponse(BaseModel):
    name: str
    t: float = 0.0
    ended: bool = False
    entities: List[EntityView] = Field(default_factory=list)
