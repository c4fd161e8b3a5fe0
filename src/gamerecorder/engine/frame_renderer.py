"""Frame renderer — draws the replay engine's live entities.

The drawing surface is any object with ``draw_rect``, ``draw_circle``
and ``draw_line``.  Generic shapes are drawn directly; custom kinds are
looked up by entity name in a table of drawer callables.  Custom kinds
without a drawer are not drawn.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from gamerecorder.models.entity import ShapeKind
from gamerecorder.models.live import CustomKind, GenericShape, LiveEntity

CIRCLE_SEGMENTS = 16

CustomDrawer = Callable[[Any, LiveEntity], None]


def draw_player(renderer: Any, ent: LiveEntity) -> None:
    """Simplified player figure: body, head and two arms."""
    x, y = ent.x, ent.y
    renderer.draw_rect(x - 8, y - 10, 16, 20, 1.0, 0.0, 0.0, 1.0)
    renderer.draw_rect(x - 6, y - 22, 12, 12, 1.0, 0.5, 0.0, 1.0)
    renderer.draw_rect(x - 13, y - 5, 6, 12, 1.0, 0.8, 0.0, 1.0)
    renderer.draw_rect(x + 7, y - 5, 6, 12, 0.0, 1.0, 0.0, 1.0)


DEFAULT_CUSTOM_DRAWERS: dict[str, CustomDrawer] = {
    "Player": draw_player,
}


def draw_entity(renderer: Any, ent: LiveEntity,
                custom_drawers: dict[str, CustomDrawer] | None = None) -> bool:
    """Draw one entity.  Returns False when nothing could be drawn."""
    look = ent.look
    if isinstance(look, GenericShape):
        rd = look.descriptor
        r, g, b, a = rd.color.as_tuple()
        if rd.kind is ShapeKind.CIRCLE:
            radius = rd.width / 2
            renderer.draw_circle(ent.x + radius, ent.y + radius, radius, CIRCLE_SEGMENTS, r, g, b, a)
        elif rd.kind is ShapeKind.LINE:
            renderer.draw_line(ent.x, ent.y, ent.x + rd.width, ent.y + rd.height, r, g, b, a)
        else:
            renderer.draw_rect(ent.x, ent.y, rd.width, rd.height, r, g, b, a)
        return True

    if isinstance(look, CustomKind):
        drawers = DEFAULT_CUSTOM_DRAWERS if custom_drawers is None else custom_drawers
        drawer = drawers.get(look.name)
        if drawer is None:
            return False
        drawer(renderer, ent)
        return True
    return False


def draw_frame(renderer: Any, entities: Iterable[LiveEntity],
               custom_drawers: dict[str, CustomDrawer] | None = None) -> int:
    """Draw every entity; returns how many were drawn."""
    return sum(1 for ent in entities if draw_entity(renderer, ent, custom_drawers))


@dataclass
class DrawList:
    """Renderer that records draw calls instead of painting them.

    Each call is stored as ``(primitive, args)``.
    """

    calls: list[tuple[str, tuple[float, ...]]] = field(default_factory=list)

    def draw_rect(self, x, y, w, h, r, g, b, a) -> None:
        self.calls.append(("rect", (x, y, w, h, r, g, b, a)))

    def draw_circle(self, cx, cy, radius, segments, r, g, b, a) -> None:
        self.calls.append(("circle", (cx, cy, radius, segments, r, g, b, a)))

    def draw_line(self, x1, y1, x2, y2, r, g, b, a) -> None:
        self.calls.append(("line", (x1, y1, x2, y2, r, g, b, a)))

    def clear(self) -> None:
        self.calls.clear()
