"""Line store — append-only file sink/source for recording logs.

One writer handle is open at a time.  Reading is lazy: ``read_lines``
opens the file immediately (so a missing file fails right away) and
then yields one line per record until the file is exhausted.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Iterator

from gamerecorder.loaders.recorder_config_loader import DEFAULT_RECORDINGS_DIR, RECORDING_SUFFIX

log = logging.getLogger(__name__)


class FileLineStore:
    """Log files under a recordings directory.

    Args:
        recordings_dir: Directory scanned by ``list_recordings``.
    """

    def __init__(self, recordings_dir: str | Path = DEFAULT_RECORDINGS_DIR) -> None:
        self._dir = Path(recordings_dir)
        self._fh: IO[str] | None = None
        self._path: Path | None = None

    @property
    def recordings_dir(self) -> Path:
        return self._dir

    @property
    def is_open(self) -> bool:
        return self._fh is not None

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def open_writer(self, path: str | Path) -> None:
        """Create/truncate ``path`` (and its parent directories) for writing.

        Raises:
            OSError: If the path is not writable.
        """
        self.close_writer()
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        self._fh = p.open("w", encoding="utf-8", newline="\n")
        self._path = p
        log.info("Recording writer opened: %s", p)

    def write_line(self, line: str) -> None:
        """Append one record.

        Raises:
            OSError: On write failure or when no writer is open.
        """
        fh = self._fh
        if fh is None:
            raise OSError("recording writer is not open")
        try:
            fh.write(line)
            fh.write("\n")
        except ValueError as exc:
            # Handle closed from another thread.
            raise OSError(str(exc)) from exc

    def close_writer(self) -> None:
        """Flush and release the writer.  Safe to call repeatedly."""
        fh, self._fh = self._fh, None
        if fh is None:
            return
        try:
            fh.flush()
        except ValueError:
            pass  # already closed by the other thread
        finally:
            fh.close()
        log.info("Recording writer closed: %s", self._path)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read_lines(self, path: str | Path) -> Iterator[str]:
        """Lazy, single-pass iterator over the raw lines of a log.

        Undecodable bytes are replaced with U+FFFD, so a corrupt line
        comes back as text the parser does not recognize.

        Raises:
            OSError: If the file is missing or unreadable.
        """
        fh = Path(path).open("r", encoding="utf-8", errors="replace")
        return _iter_lines(fh)

    def list_recordings(self) -> list[Path]:
        """All log files in the recordings directory, sorted by name.

        A missing directory yields an empty list.
        """
        if not self._dir.is_dir():
            return []
        return sorted(
            (p for p in self._dir.iterdir() if p.is_file() and p.suffix == RECORDING_SUFFIX),
            key=lambda p: p.name,
        )


def _iter_lines(fh: IO[str]) -> Iterator[str]:
    with fh:
        for line in fh:
            yield line.rstrip("\r\n")
