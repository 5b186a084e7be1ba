"""Plain-text event logging for benchmark and evaluation sessions."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any


class EventLogger:
    """Append-only text log, one UTC-timestamped event per line.

    Lines have the form ``<iso timestamp> <event> key=value ...`` so that
    runs can be grepped without a parser.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self._path.open("a", encoding="utf-8")

    def __enter__(self) -> EventLogger:
        return self

    def __exit__(self, exc_type, exc, exc_tb) -> None:
        self.close()

    def log(self, event: str, **fields: Any) -> None:
        """Append ``event`` with optional ``key=value`` fields."""
        timestamp = datetime.now(timezone.utc).isoformat()
        parts = [timestamp, event]
        parts.extend(f"{key}={_format_value(value)}" for key, value in fields.items())
        self._handle.write(" ".join(parts) + "\n")
        self._handle.flush()

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()

    @property
    def path(self) -> Path:
        return self._path


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.6g}"
    return str(value)


__all__ = ["EventLogger"]
