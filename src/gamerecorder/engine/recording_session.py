"""Recording session — samples the running world into a log file.

Lifecycle: ``Idle -> Recording -> Stopped``.  A stopped session cannot be
restarted; create a new session for the next recording.

Threads:
  The caller (simulation) thread calls ``start`` / ``update`` / ``stop``
  once per tick and is the only producer of encoded lines.  One
  background writer thread ("record-writer") is the only consumer and
  the only thread touching the line store while recording.  The bounded
  queue between them is the sole shared state.

Backpressure:
  ``update`` blocks (without timeout) while the queue is full, so no
  record is ever dropped while recording.  ``stop`` waits for the writer
  only up to ``join_timeout_sec``; lines still queued after that are lost.
"""

from __future__ import annotations

import enum
import logging
import queue
import threading
import time
from typing import Any, Iterable

from gamerecorder.loaders.recorder_config_loader import RecordingConfig
from gamerecorder.models.entity import EntityEntry
from gamerecorder.persistence import encoder
from gamerecorder.persistence.line_store import FileLineStore
from gamerecorder.util.events import EventBus, KeyframeCaptured, RecordingStarted, RecordingStopped

log = logging.getLogger(__name__)

# Keyframes are skipped during the first ticks so the world can finish
# initializing before it is sampled.
WARMUP_SEC = 0.1


class SessionState(enum.Enum):
    IDLE = "idle"
    RECORDING = "recording"
    STOPPED = "stopped"


def capture_entries(snapshot: Any) -> list[EntityEntry]:
    """Positional entity entries for every positioned entity of ``snapshot``.

    ``id`` is ``name_n`` where ``n`` counts same-named entities in
    enumeration order, restarting at 0 for every keyframe.  The id is a
    label within this keyframe only, not a stable identity.
    """
    counters: dict[str, int] = {}
    entries: list[EntityEntry] = []
    for ent in _entities_of(snapshot):
        pos = getattr(ent, "position", None)
        if pos is None:
            continue
        name = ent.name
        index = counters.get(name, 0)
        counters[name] = index + 1
        entries.append(EntityEntry(
            id=f"{name}_{index}",
            name=name,
            x=float(pos[0]),
            y=float(pos[1]),
            render=getattr(ent, "render", None),
        ))
    return entries


def _entities_of(snapshot: Any) -> Iterable[Any]:
    entities = getattr(snapshot, "entities", None)
    if entities is None:
        return ()
    return entities() if callable(entities) else entities


class RecordingSession:
    """Producer side of the recording pipeline.

    Args:
        config: Immutable parameters of this recording.
        store: Line store used by the writer thread.
        event_bus: Optional bus for start/keyframe/stop notifications.
        poll_sec: Writer sleep when the queue is empty.
        join_timeout_sec: Upper bound for waiting on the writer in ``stop``.
    """

    def __init__(
        self,
        config: RecordingConfig,
        store: FileLineStore | None = None,
        event_bus: EventBus | None = None,
        poll_sec: float = 0.002,
        join_timeout_sec: float = 0.5,
    ) -> None:
        self.config = config
        self._store = store or FileLineStore()
        self._events = event_bus
        self._poll_sec = poll_sec
        self._join_timeout_sec = join_timeout_sec

        self._queue: queue.Queue[str] = queue.Queue(maxsize=config.queue_capacity)
        self._writer: threading.Thread | None = None
        self._active = False
        self._state = SessionState.IDLE

        self.elapsed: float = 0.0
        self.keyframe_elapsed: float = 0.0
        self._last_snapshot: Any = None

        # -- Counters ---------------------------------------------------
        self.lines_enqueued: int = 0
        self.lines_written: int = 0
        self.write_errors: int = 0
        self.keyframes_written: int = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._active

    @property
    def queued_lines(self) -> int:
        return self._queue.qsize()

    @property
    def writer_alive(self) -> bool:
        return self._writer is not None and self._writer.is_alive()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, snapshot: Any, width: int, height: int) -> None:
        """Open the log, start the writer thread and queue the header.

        A second call while recording is ignored.

        Raises:
            OSError: If the output file cannot be opened.
            RuntimeError: If the session was already stopped.
        """
        if self._active:
            log.warning("Recording already active (%s) — start ignored", self.config.output_path)
            return
        if self._state is SessionState.STOPPED:
            raise RuntimeError("recording session already stopped; create a new session")

        self._store.open_writer(self.config.output_path)

        self._active = True
        self._writer = threading.Thread(target=self._drain, name="record-writer", daemon=True)
        self._writer.start()
        self._state = SessionState.RECORDING

        self._enqueue(encoder.encode_header(width, height))
        self.keyframe_elapsed = 0.0
        self._last_snapshot = snapshot

        log.info("Recording started: %s (%dx%d, keyframe every %.2fs)",
                 self.config.output_path, width, height, self.config.keyframe_interval_sec)
        if self._events is not None:
            self._events.emit(RecordingStarted(path=self.config.output_path, width=width, height=height))

    def update(self, dt: float, snapshot: Any, input_source: Any) -> None:
        """Sample one simulation tick.  Does nothing unless recording."""
        if not self._active:
            return

        self.elapsed += dt
        self.keyframe_elapsed += dt
        self._last_snapshot = snapshot

        keys = input_source.just_pressed() if input_source is not None else ()
        if keys:
            self._enqueue(encoder.encode_input(self.elapsed, keys, self.config.quantize_decimals))

        if self.elapsed >= WARMUP_SEC and self.keyframe_elapsed >= self.config.keyframe_interval_sec:
            # An empty world leaves the accumulator untouched, so the next
            # non-empty sample is taken right away.
            if self._write_keyframe(snapshot):
                self.keyframe_elapsed = 0.0

    def stop(self) -> None:
        """Write a final keyframe, signal the writer and wait for it (bounded)."""
        if not self._active:
            return

        try:
            if self._last_snapshot is not None:
                self._write_keyframe(self._last_snapshot)
        except Exception:
            log.exception("Final keyframe failed — stopping anyway")

        self._active = False
        writer = self._writer
        if writer is not None:
            writer.join(self._join_timeout_sec)

        pending = self.queued_lines
        if writer is not None and writer.is_alive():
            log.warning("Recording writer did not finish within %.2fs — %d lines dropped",
                        self._join_timeout_sec, pending)
        self._store.close_writer()
        self._state = SessionState.STOPPED

        log.info("Recording stopped: %s (%d lines written, %d keyframes, %.2fs)",
                 self.config.output_path, self.lines_written, self.keyframes_written, self.elapsed)
        if self._events is not None:
            self._events.emit(RecordingStopped(path=self.config.output_path, pending_lines=pending))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _write_keyframe(self, snapshot: Any) -> bool:
        """Queue a keyframe of ``snapshot``.  Returns False for an empty world."""
        entries = capture_entries(snapshot)
        if not entries:
            return False
        self._enqueue(encoder.encode_keyframe(self.elapsed, entries, self.config.quantize_decimals))
        self.keyframes_written += 1
        if self._events is not None:
            self._events.emit(KeyframeCaptured(t=self.elapsed, entity_count=len(entries)))
        return True

    def _enqueue(self, line: str) -> None:
        self._queue.put(line)
        self.lines_enqueued += 1

    def _drain(self) -> None:
        """Writer thread: pop, write, repeat until stopped and drained."""
        try:
            while self._active or not self._queue.empty():
                try:
                    line = self._queue.get_nowait()
                except queue.Empty:
                    time.sleep(self._poll_sec)
                    continue
                try:
                    self._store.write_line(line)
                    self.lines_written += 1
                except OSError:
                    if not self._store.is_open:
                        # stop() gave up waiting and closed the store.
                        log.warning("Recording writer closed — %d queued lines discarded",
                                    self._queue.qsize() + 1)
                        break
                    self.write_errors += 1
                    log.exception("Failed to write recording line to %s", self.config.output_path)
        finally:
            self._store.close_writer()
