"""Recorded entity model — the records stored in a recording log.

A log is an ordered sequence of records, one per line:

- ``HeaderRecord``   — written once, first.
- ``InputRecord``    — keys pressed during a single tick.
- ``KeyframeRecord`` — every positioned entity at one timestamp.

Entity ids are positional: ``<name>_<n>`` where ``n`` counts entities of
the same name in enumeration order within a single keyframe.  Two
entities of the same name can therefore swap ids between keyframes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ShapeKind(str, Enum):
    """Generic shape a renderer can draw without knowing the entity."""

    RECTANGLE = "RECTANGLE"
    CIRCLE = "CIRCLE"
    LINE = "LINE"
    CUSTOM = "CUSTOM"

    @classmethod
    def parse(cls, raw: str) -> "ShapeKind":
        """Map a recorded shape name; unknown names fall back to RECTANGLE."""
        try:
            return cls(raw)
        except ValueError:
            return cls.RECTANGLE


@dataclass(frozen=True)
class Color:
    r: float
    g: float
    b: float
    a: float = 1.0

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.r, self.g, self.b, self.a)


# Color used when a recorded shape carries no (or an incomplete) color.
DEFAULT_COLOR = Color(0.9, 0.9, 0.2, 1.0)


@dataclass(frozen=True)
class RenderDescriptor:
    """Shape, size and color of an entity with a generic renderer."""

    kind: ShapeKind
    width: float
    height: float
    color: Color = DEFAULT_COLOR


@dataclass(frozen=True)
class EntityEntry:
    """A single entity inside a keyframe.

    Attributes:
        id: Positional id (``name_n``), unique within one keyframe only.
        name: Entity category, e.g. "Enemy".
        x: Horizontal position.
        y: Vertical position.
        render: Generic shape, or None when the entity is custom-drawn.
    """

    id: str
    name: str
    x: float
    y: float
    render: RenderDescriptor | None = None


@dataclass(frozen=True)
class HeaderRecord:
    version: int = 1
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class InputRecord:
    t: float
    keys: tuple[int, ...] = ()


@dataclass
class KeyframeRecord:
    """Full snapshot of every positioned entity at simulation time ``t``."""

    t: float
    entities: list[EntityEntry] = field(default_factory=list)

    @property
    def ids(self) -> set[str]:
        return {e.id for e in self.entities}
