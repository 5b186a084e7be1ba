"""CSV recording of network throughput measurements."""

from __future__ import annotations

import csv
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, IO


@dataclass(frozen=True, slots=True)
class MetricsRow:
    """One timed batch of ``activate()`` calls on a single network."""

    repeat: int
    neuron_count: int
    connection_count: int
    timesteps_per_activation: int
    activations: int
    duration_s: float
    activations_per_sec: float

    @property
    def timesteps_per_sec(self) -> float:
        return self.activations_per_sec * self.timesteps_per_activation


class MetricsWriter:
    """CSV-backed writer that appends rows and writes the header once."""

    _fieldnames = [item.name for item in fields(MetricsRow)]

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        exists = self._path.exists() and self._path.stat().st_size > 0
        self._handle: IO[str] = self._path.open("a", encoding="utf-8", newline="")
        self._writer = csv.DictWriter(self._handle, fieldnames=self._fieldnames)
        if not exists:
            self._writer.writeheader()
            self._handle.flush()

    def __enter__(self) -> MetricsWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def append(self, row: MetricsRow) -> None:
        """Append a row and flush to disk."""
        self._writer.writerow(asdict(row))
        self._handle.flush()

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()

    @property
    def path(self) -> Path:
        return self._path


def read_metrics(path: Path) -> list[MetricsRow]:
    """Load rows previously written by :class:`MetricsWriter`."""
    rows: list[MetricsRow] = []
    with Path(path).open("r", encoding="utf-8", newline="") as handle:
        for record in csv.DictReader(handle):
            rows.append(
                MetricsRow(
                    repeat=int(record["repeat"]),
                    neuron_count=int(record["neuron_count"]),
                    connection_count=int(record["connection_count"]),
                    timesteps_per_activation=int(record["timesteps_per_activation"]),
                    activations=int(record["activations"]),
                    duration_s=float(record["duration_s"]),
                    activations_per_sec=float(record["activations_per_sec"]),
                )
            )
    return rows


__all__ = ["MetricsRow", "MetricsWriter", "read_metrics"]
