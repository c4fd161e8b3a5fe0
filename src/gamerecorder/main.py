"""Recorder entry point.

Commands:
    record   run the demo world and record it
    list     list available recordings
    replay   play a recording back (headless, progress is logged)
    serve    start the REST API for browsing recordings

Usage:
    python -m gamerecorder.main record --seconds 10
    # or via entry point:
    gamerecorder replay recordings/game_20260101_120000.jsonl
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from gamerecorder.engine.demo_world import DemoWorld
from gamerecorder.engine.frame_renderer import DrawList, draw_frame
from gamerecorder.engine.game_loop import TickLoop
from gamerecorder.engine.recording_session import RecordingSession
from gamerecorder.engine.replay_engine import ReplayEngine, ReplayState
from gamerecorder.loaders.recorder_config_loader import (
    DEFAULT_RECORDER_CONFIG_PATH,
    RecorderConfig,
    load_recorder_config,
)
from gamerecorder.persistence.line_store import FileLineStore
from gamerecorder.util.events import EntityRemoved, EntitySpawned, EventBus, KeyframeCaptured
from gamerecorder.util.types import format_size, format_time

log = logging.getLogger(__name__)


# ===================================================================
# Commands
# ===================================================================


async def record(config: RecorderConfig, seconds: float, output: str | None = None) -> str:
    """Record ``seconds`` of the demo world.  Returns the log path."""
    bus = EventBus()
    keyframes = []
    bus.on(KeyframeCaptured, keyframes.append)

    world = DemoWorld(width=config.width, height=config.height)
    session = RecordingSession(
        config.session_config(output),
        store=FileLineStore(config.recordings_dir),
        event_bus=bus,
        poll_sec=config.writer_poll_sec,
        join_timeout_sec=config.writer_join_timeout_sec,
    )
    session.start(world.snapshot(), config.width, config.height)

    def _step(dt: float) -> bool:
        world.step(dt)
        session.update(dt, world.snapshot(), world.input)
        return world.time < seconds

    loop = TickLoop(_step, tick_hz=config.tick_hz)
    _install_stop_handlers(loop)
    try:
        await loop.run()
    finally:
        session.stop()

    log.info("Recorded %s in %d ticks (%d keyframes) to %s",
             format_time(session.elapsed), loop.tick_count, len(keyframes),
             session.config.output_path)
    return session.config.output_path


async def replay(config: RecorderConfig, path: str | None = None, index: int = 0) -> bool:
    """Play a recording in real time.  Returns False when nothing was played."""
    bus = EventBus()
    bus.on(EntitySpawned, lambda e: log.debug("spawn %s", e.entity_id))
    bus.on(EntityRemoved, lambda e: log.debug("remove %s", e.entity_id))

    engine = ReplayEngine(path, store=FileLineStore(config.recordings_dir), event_bus=bus)
    if engine.state is ReplayState.FILE_SELECT:
        if engine.selection_empty:
            log.warning("No recordings found in %s", config.recordings_dir)
            return False
        if not engine.select(index):
            log.warning("No recording at index %d (%d available)", index, len(engine.recordings))
            return False

    surface = DrawList()
    last_report = -1

    def _step(dt: float) -> bool:
        nonlocal last_report
        surface.clear()
        draw_frame(surface, engine.update(dt))
        if int(engine.clock) != last_report:
            last_report = int(engine.clock)
            log.info("replay %s — %d entities, %d draw calls",
                     engine.progress_text(), len(engine.entities), len(surface.calls))
        return not engine.ended

    loop = TickLoop(_step, tick_hz=config.tick_hz)
    _install_stop_handlers(loop, on_stop=engine.cancel)
    await loop.run()
    return True


def list_recordings(config: RecorderConfig) -> list[str]:
    store = FileLineStore(config.recordings_dir)
    names = []
    for i, p in enumerate(store.list_recordings()):
        print(f"{i:3d}  {p.name}  ({format_size(p.stat().st_size)})")
        names.append(p.name)
    if not names:
        print(f"No recordings in {config.recordings_dir}")
    return names


def serve(config: RecorderConfig) -> None:
    import uvicorn

    from gamerecorder.network.rest_api import create_app

    log.info("REST API listening on http://0.0.0.0:%d", config.rest_port)
    uvicorn.run(create_app(config), host="0.0.0.0", port=config.rest_port,
                log_level="info", access_log=False)


def _install_stop_handlers(loop: TickLoop, on_stop=None) -> None:
    """Stop the tick loop on SIGINT / SIGTERM."""
    def _request_stop() -> None:
        log.info("Stop signal received — stopping …")
        if on_stop is not None:
            on_stop()
        loop.stop()

    try:
        running = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            running.add_signal_handler(sig, _request_stop)
    except (NotImplementedError, RuntimeError):
        pass  # not supported on this platform/loop


# ===================================================================
# Entry points
# ===================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gamerecorder", description="Record and replay game sessions")
    parser.add_argument("--config", default=DEFAULT_RECORDER_CONFIG_PATH,
                        help="Recorder config YAML (default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_record = sub.add_parser("record", help="Record the demo world")
    p_record.add_argument("--seconds", type=float, default=10.0)
    p_record.add_argument("--output", default=None, help="Log path (default: timestamped)")

    sub.add_parser("list", help="List recordings")

    p_replay = sub.add_parser("replay", help="Replay a recording")
    p_replay.add_argument("path", nargs="?", default=None)
    p_replay.add_argument("--index", type=int, default=0,
                          help="Recording to pick when no path is given")

    sub.add_parser("serve", help="Start the REST API")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the recorder CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    args = build_parser().parse_args(argv)
    config = load_recorder_config(args.config)

    if args.command == "record":
        try:
            asyncio.run(record(config, args.seconds, args.output))
        except OSError as exc:
            print(f"Error: cannot record: {exc}", file=sys.stderr)
            return 1
        return 0
    if args.command == "list":
        list_recordings(config)
        return 0
    if args.command == "replay":
        return 0 if asyncio.run(replay(config, args.path, args.index)) else 1
    if args.command == "serve":
        serve(config)
        return 0
    return 2


if __name__ == "__main__":
    sys.exit(main())
