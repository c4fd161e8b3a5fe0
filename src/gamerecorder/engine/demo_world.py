"""Demo world — a tiny deterministic scene to record.

Stands in for a real game so the recorder can be exercised from the
command line:

- one "Player" (custom-drawn) circling the screen center and firing;
- "Enemy" rectangles spawning at the top and falling down;
- "Bullet" circles flying upwards.

Enemies and bullets are destroyed when they leave the screen, so the
recording contains births and deaths.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass

from gamerecorder.models.entity import Color, RenderDescriptor, ShapeKind
from gamerecorder.models.snapshot import InputState, SceneEntity, WorldSnapshot

KEY_SPACE = 32

ENEMY_SHAPE = RenderDescriptor(ShapeKind.RECTANGLE, 20.0, 20.0, Color(1.0, 0.5, 0.0, 1.0))
BULLET_SHAPE = RenderDescriptor(ShapeKind.CIRCLE, 6.0, 6.0, Color(1.0, 1.0, 0.0, 1.0))


@dataclass
class _Body:
    name: str
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    render: RenderDescriptor | None = None


class DemoWorld:
    """Seeded simulation producing ``WorldSnapshot``s.

    Args:
        width: Screen width.
        height: Screen height.
        seed: Random seed (same seed, same world).
        spawn_interval_sec: Seconds between enemy spawns.
        fire_interval_sec: Seconds between player shots.
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 600,
        seed: int = 1,
        spawn_interval_sec: float = 0.8,
        fire_interval_sec: float = 0.5,
    ) -> None:
        self.width = width
        self.height = height
        self._rng = random.Random(seed)
        self._spawn_interval = spawn_interval_sec
        self._fire_interval = fire_interval_sec
        self._spawn_timer = 0.0
        self._fire_timer = 0.0
        self.time = 0.0
        self.input = InputState()
        self._player = _Body("Player", width / 2, height / 2)
        self._bodies: list[_Body] = [self._player]

    def step(self, dt: float) -> None:
        """Advance the world by ``dt`` seconds."""
        self.input.end_tick()
        self.time += dt

        angle = self.time * 0.8
        self._player.x = self.width / 2 + math.cos(angle) * self.width / 4
        self._player.y = self.height / 2 + math.sin(angle) * self.height / 4

        self._spawn_timer += dt
        if self._spawn_timer >= self._spawn_interval:
            self._spawn_timer = 0.0
            x = self._rng.uniform(0, self.width - ENEMY_SHAPE.width)
            speed = self._rng.uniform(60.0, 140.0)
            self._bodies.append(_Body("Enemy", x, -ENEMY_SHAPE.height, vy=speed, render=ENEMY_SHAPE))

        self._fire_timer += dt
        if self._fire_timer >= self._fire_interval:
            self._fire_timer = 0.0
            self.input.press(KEY_SPACE)
            self._bodies.append(_Body("Bullet", self._player.x, self._player.y, vy=-300.0,
                                      render=BULLET_SHAPE))
        else:
            self.input.release(KEY_SPACE)

        for body in self._bodies:
            body.x += body.vx * dt
            body.y += body.vy * dt
        self._bodies = [b for b in self._bodies if b is self._player or self._on_screen(b)]

    def snapshot(self) -> WorldSnapshot:
        return WorldSnapshot(entities=[
            SceneEntity(name=b.name, position=(b.x, b.y), render=b.render)
            for b in self._bodies
        ])

    @property
    def entity_count(self) -> int:
        return len(self._bodies)

    def _on_screen(self, body: _Body) -> bool:
        margin = 40.0
        return -margin <= body.y <= self.height + margin and -margin <= body.x <= self.width + margin
