"""Live replay entities — the per-tick output of the replay engine.

Each entity carries a tagged look: either a ``GenericShape`` that any
renderer can draw, or a ``CustomKind`` that the rendering side must
resolve by name (e.g. the player figure).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from gamerecorder.models.entity import EntityEntry, RenderDescriptor, ShapeKind


@dataclass(frozen=True)
class GenericShape:
    descriptor: RenderDescriptor


@dataclass(frozen=True)
class CustomKind:
    name: str


Look = Union[GenericShape, CustomKind]


@dataclass
class LiveEntity:
    """An entity currently shown by the replay.

    Attributes:
        id: Positional id from the log.
        name: Entity category.
        x: Current (interpolated) horizontal position.
        y: Current (interpolated) vertical position.
        look: How the entity is drawn.
    """

    id: str
    name: str
    x: float
    y: float
    look: Look

    @classmethod
    def from_entry(cls, entry: EntityEntry) -> "LiveEntity":
        return cls(id=entry.id, name=entry.name, x=entry.x, y=entry.y,
                   look=look_for(entry))


def look_for(entry: EntityEntry) -> Look:
    """Generic shape when recorded and not CUSTOM, otherwise a custom kind."""
    if entry.render is not None and entry.render.kind is not ShapeKind.CUSTOM:
        return GenericShape(entry.render)
    return CustomKind(entry.name)
