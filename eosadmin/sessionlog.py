"""Per-session command log stored under the user's home directory."""

from __future__ import annotations

import os
import threading
from collections import deque
from datetime import datetime
from pathlib import Path
from typing import Sequence

MAX_CACHED_COMMANDS = 1000
_MAX_PREVIEW = 500
_LOG_DIR_NAME = ".eosadmin"


def init_session_log(home: str | os.PathLike[str] | None = None) -> Path | None:
    """Create a timestamped session log file and point ``latest.log`` at it.

    Returns the log file path, or None if anything fails (logging is then off).
    """
    try:
        base = Path(home) if home is not None else Path.home()
        log_dir = base / _LOG_DIR_NAME / "sessions"
        log_dir.mkdir(parents=True, exist_ok=True)

        stamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
        session_file = log_dir / f"{stamp}.log"
        session_file.touch()
    except (OSError, RuntimeError):
        return None

    latest = base / _LOG_DIR_NAME / "latest.log"
    try:
        latest.unlink()
    except OSError:
        pass
    try:
        latest.symlink_to(Path("sessions") / f"{stamp}.log")
    except OSError:
        pass

    return session_file


def is_session_command_line(line: str) -> bool:
    """True for logged command lines; error and output lines are excluded."""
    if not line.startswith("["):
        return False
    if "] ERROR " in line:
        return False
    if "]   output: " in line:
        return False
    return True


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


class SessionLog:
    """Append-only log of commands issued during one session."""

    def __init__(self, path: str | os.PathLike[str] | None) -> None:
        self.path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._offset = 0
        self._cache: deque[str] = deque(maxlen=MAX_CACHED_COMMANDS)

    @property
    def enabled(self) -> bool:
        return self.path is not None

    def commands(self, n: int) -> list[str]:
        """Return the last ``n`` command lines, reading only what was appended since last time."""
        if self.path is None:
            raise RuntimeError("logging disabled")
        if n <= 0:
            return []

        with self._lock:
            with open(self.path, "rb") as fh:
                size = os.fstat(fh.fileno()).st_size
                if size < self._offset:
                    self._offset = 0
                    self._cache.clear()
                fh.seek(self._offset)
                data = fh.read()
                self._offset = os.fstat(fh.fileno()).st_size

            lines = data.split(b"\n")
            if lines and lines[-1] == b"":
                lines.pop()
            for raw in lines:
                line = raw.removesuffix(b"\r").decode("utf-8", errors="replace")
                if is_session_command_line(line):
                    self._cache.append(line)

            return list(self._cache)[-n:]

    def _append(self, text: str) -> None:
        if self.path is None:
            return
        try:
            fd = os.open(self.path, os.O_APPEND | os.O_WRONLY)
        except OSError:
            return
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            try:
                fh.write(text)
            except OSError:
                pass

    def log_command(self, command: str) -> None:
        """Record a command line; silently does nothing when logging is off."""
        self._append(f"[{_timestamp()}] {command}\n")

    def log_error(self, args: Sequence[str], output: str | bytes, error: object) -> None:
        """Record a failed command with a short preview of its output."""
        if isinstance(output, bytes):
            output = output.decode("utf-8", errors="replace")
        preview = output.strip()
        if len(preview) > _MAX_PREVIEW:
            preview = preview[:_MAX_PREVIEW] + "...(truncated)"
        label = args[-1] if args else ""
        stamp = _timestamp()
        text = f"[{stamp}] ERROR ({label}): {error}\n"
        if preview:
            text += f"[{stamp}]   output: {preview}\n"
        self._append(text)