"""Replay engine — time-interpolated playback of a recording log.

States::

    FILE_SELECT --select()--> LOADING --> PLAYING --> ENDED
                              LOADING ------------> ENDED   (no keyframes)

Each ``update(dt)`` advances the playback clock, finds the bracket
``(a, b)`` of consecutive keyframes around it and moves the live
entities:

- id in ``a`` and ``b``: linear interpolation between both positions;
- id only in ``b``: snapped to ``b`` (born inside the bracket);
- live id missing from ``b``: removed right away (destroyed at the
  bracket boundary, not at its true removal time).

Ids are positional (see ``models.entity``), so two same-named entities
may swap identities when one of them is created or destroyed.

Keyframes are assumed to be ordered by timestamp; the log is not
validated and out-of-order logs play back in an undefined way.
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path

from gamerecorder.models.entity import EntityEntry, HeaderRecord, InputRecord, KeyframeRecord
from gamerecorder.models.live import LiveEntity
from gamerecorder.persistence.line_store import FileLineStore
from gamerecorder.persistence.record_parser import parse_record
from gamerecorder.util.events import (
    EntityRemoved,
    EntitySpawned,
    EventBus,
    PlaybackEnded,
    ReplayLoaded,
)
from gamerecorder.util.types import format_progress

log = logging.getLogger(__name__)

# Lower bound for a bracket's span (avoids division by zero).
MIN_SPAN = 1e-6


class ReplayState(enum.Enum):
    LOADING = "loading"
    FILE_SELECT = "file_select"
    PLAYING = "playing"
    ENDED = "ended"


class ReplayEngine:
    """Single-threaded playback of one recording.

    Args:
        path: Log to play.  None enters file selection first.
        store: Line store used for reading and listing logs.
        event_bus: Optional bus for load/spawn/remove/end notifications.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        store: FileLineStore | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._store = store or FileLineStore()
        self._events = event_bus

        self.path: Path | None = None
        self.header: HeaderRecord | None = None
        self.inputs: list[InputRecord] = []
        self.keyframes: list[KeyframeRecord] = []
        self._index: list[dict[str, EntityEntry]] = []

        self._live: dict[str, LiveEntity] = {}
        self.clock: float = 0.0
        self._bracket = 0
        self._cancelled = False

        self.recordings: list[Path] = []
        self.selected_index = 0

        if path is None:
            self.recordings = self._store.list_recordings()
            self.state = ReplayState.FILE_SELECT
        else:
            self.state = ReplayState.LOADING
            self.load(path)

    # ------------------------------------------------------------------
    # File selection
    # ------------------------------------------------------------------

    @property
    def selection_empty(self) -> bool:
        return not self.recordings

    def move_selection(self, step: int) -> None:
        """Move the cursor by ``step`` entries, wrapping around."""
        if not self.recordings:
            return
        self.selected_index = (self.selected_index + step) % len(self.recordings)

    def select(self, index: int | None = None) -> bool:
        """Load the recording at ``index`` (default: the cursor).

        Returns False, without changing state, when there is nothing to
        select.
        """
        if self.state is not ReplayState.FILE_SELECT or not self.recordings:
            return False
        if index is not None:
            if not 0 <= index < len(self.recordings):
                return False
            self.selected_index = index
        self.state = ReplayState.LOADING
        self.load(self.recordings[self.selected_index])
        return True

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, path: str | Path) -> None:
        """Read the whole log and build the live set from the first keyframe."""
        self.path = Path(path)
        self.header = None
        self.inputs = []
        self.keyframes = []
        self._live.clear()
        self.clock = 0.0
        self._bracket = 0

        try:
            for line in self._store.read_lines(self.path):
                record = parse_record(line)
                if isinstance(record, KeyframeRecord):
                    self.keyframes.append(record)
                elif isinstance(record, InputRecord):
                    self.inputs.append(record)
                elif isinstance(record, HeaderRecord) and self.header is None:
                    self.header = record
        except OSError:
            log.exception("Failed to load recording %s", self.path)

        self._index = [{e.id: e for e in kf.entities} for kf in self.keyframes]
        log.info("Loaded %d keyframes (%d input records) from %s",
                 len(self.keyframes), len(self.inputs), self.path)
        if self._events is not None:
            self._events.emit(ReplayLoaded(path=str(self.path), keyframe_count=len(self.keyframes)))

        if not self.keyframes:
            self._end(cancelled=False)
            return

        for entry in self.keyframes[0].entities:
            self._spawn(entry)
        self.state = ReplayState.PLAYING

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    @property
    def duration(self) -> float:
        return self.keyframes[-1].t if self.keyframes else 0.0

    @property
    def ended(self) -> bool:
        return self.state is ReplayState.ENDED

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def entities(self) -> list[LiveEntity]:
        """Live entities in spawn order."""
        return list(self._live.values())

    def get(self, entity_id: str) -> LiveEntity | None:
        return self._live.get(entity_id)

    def update(self, dt: float) -> list[LiveEntity]:
        """Advance the clock by ``dt`` and return the live entities."""
        if self.state is not ReplayState.PLAYING:
            return self.entities

        self.clock += dt
        last_t = self.keyframes[-1].t
        reached_end = self.clock >= last_t
        if reached_end:
            self.clock = last_t

        a, b = self._find_bracket(self.clock)
        span = max(MIN_SPAN, self.keyframes[b].t - self.keyframes[a].t)
        u = min(1.0, max(0.0, (self.clock - self.keyframes[a].t) / span))
        self._apply(a, b, u)

        if reached_end:
            self._end(cancelled=False)
        return self.entities

    def seek(self, t: float) -> list[LiveEntity]:
        """Advance playback to absolute time ``t`` (never backwards)."""
        return self.update(max(0.0, t - self.clock))

    def cancel(self) -> None:
        """End playback immediately, keeping the current frame."""
        if self.state is ReplayState.ENDED:
            return
        self._cancelled = True
        self._end(cancelled=True)

    def progress_text(self) -> str:
        return format_progress(self.clock, self.duration)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _find_bracket(self, clock: float) -> tuple[int, int]:
        """Indices of the first pair ``(i, i+1)`` with ``t_i <= clock <= t_i+1``.

        The search resumes at the previous bracket while the clock moves
        forward.  Without a match, the first and last keyframes are used.
        """
        kfs = self.keyframes
        start = self._bracket if kfs[self._bracket].t <= clock else 0
        for i in range(start, len(kfs) - 1):
            if kfs[i].t <= clock <= kfs[i + 1].t:
                self._bracket = i
                return i, i + 1
        return 0, len(kfs) - 1

    def _apply(self, a: int, b: int, u: float) -> None:
        kf_b = self.keyframes[b]
        ids_b = self._index[b]
        ids_a = self._index[a]

        for entity_id in [i for i in self._live if i not in ids_b]:
            del self._live[entity_id]
            if self._events is not None:
                self._events.emit(EntityRemoved(entity_id=entity_id))

        for eb in kf_b.entities:
            live = self._live.get(eb.id) or self._spawn(eb)
            ea = ids_a.get(eb.id)
            if ea is not None:
                live.x = ea.x + (eb.x - ea.x) * u
                live.y = ea.y + (eb.y - ea.y) * u
            else:
                live.x = eb.x
                live.y = eb.y

    def _spawn(self, entry: EntityEntry) -> LiveEntity:
        live = LiveEntity.from_entry(entry)
        self._live[entry.id] = live
        if self._events is not None:
            self._events.emit(EntitySpawned(entity_id=entry.id, name=entry.name))
        return live

    def _end(self, cancelled: bool) -> None:
        self.state = ReplayState.ENDED
        log.info("Replay ended at %s%s", self.progress_text(), " (cancelled)" if cancelled else "")
        if self._events is not None:
            self._events.emit(PlaybackEnded(clock=self.clock, cancelled=cancelled))
