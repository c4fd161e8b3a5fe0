"""World snapshot and input state — what the recorder samples each tick.

The recorder only needs a small view of the running simulation:

- a snapshot source exposing ``entities``: every active entity with a
  name, an optional position and an optional generic shape;
- an input source exposing ``just_pressed()``: key codes newly pressed
  during the current tick.

Any object with the same attributes can be passed in their place.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from gamerecorder.models.entity import RenderDescriptor


@dataclass
class SceneEntity:
    """One live entity as seen by the recorder.

    Attributes:
        name: Entity category ("Player", "Enemy", ...).
        position: (x, y), or None for entities without a transform.
        render: Generic shape, or None when drawn by a custom renderer.
    """

    name: str
    position: tuple[float, float] | None = None
    render: RenderDescriptor | None = None


@dataclass
class WorldSnapshot:
    """Ordered list of active entities.  Order determines positional ids."""

    entities: list[SceneEntity] = field(default_factory=list)


class InputState:
    """Per-tick key state.

    ``press`` registers a key for the current tick; ``end_tick`` clears
    the just-pressed set and must be called once the tick is finished.
    """

    def __init__(self) -> None:
        self._held: set[int] = set()
        self._just: set[int] = set()

    def press(self, key: int) -> None:
        if key not in self._held:
            self._just.add(key)
        self._held.add(key)

    def release(self, key: int) -> None:
        self._held.discard(key)

    def just_pressed(self) -> set[int]:
        """Snapshot of the keys pressed during this tick."""
        return set(self._just)

    def end_tick(self) -> None:
        self._just.clear()
