"""Configuration loading utilities for network engines and benchmarks."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .activations import ActivationFunctionId


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Settings applied when building a network from a definition."""

    timesteps_per_activation: int = 1
    bounded_output: bool = False
    output_lower: float = 0.0
    output_upper: float = 1.0

    def __post_init__(self) -> None:
        if self.timesteps_per_activation < 1:
            msg = "timesteps_per_activation must be at least 1."
            raise ValueError(msg)
        if self.output_lower > self.output_upper:
            msg = "output_lower must not exceed output_upper."
            raise ValueError(msg)

    @property
    def output_bounds(self) -> tuple[float, float]:
        return self.output_lower, self.output_upper


def _default_benchmark_activations() -> tuple[str, ...]:
    return (
        ActivationFunctionId.LOGISTIC_APPROXIMANT_STEEP.value,
        ActivationFunctionId.SOFTSIGN_STEEP.value,
    )


@dataclass(frozen=True, slots=True)
class BenchmarkConfig:
    """Shape of the random networks and the amount of work to time."""

    input_count: int = 8
    output_count: int = 4
    hidden_count: int = 64
    connections_per_neuron: float = 4.0
    activations: tuple[str, ...] = field(default_factory=_default_benchmark_activations)
    activations_per_measurement: int = 10_000
    repeats: int = 3
    seed: int | None = None
    engine: EngineConfig = field(default_factory=EngineConfig)

    def __post_init__(self) -> None:
        for label, value in (
            ("input_count", self.input_count),
            ("output_count", self.output_count),
            ("hidden_count", self.hidden_count),
        ):
            if value < 0:
                msg = f"{label} must be non-negative."
                raise ValueError(msg)
        if self.connections_per_neuron < 0.0:
            msg = "connections_per_neuron must be non-negative."
            raise ValueError(msg)
        if not self.activations:
            msg = "At least one activation identifier must be provided."
            raise ValueError(msg)
        if self.activations_per_measurement <= 0:
            msg = "activations_per_measurement must be positive."
            raise ValueError(msg)
        if self.repeats <= 0:
            msg = "repeats must be positive."
            raise ValueError(msg)


def _load_yaml(path: Path) -> Mapping[str, Any]:
    with Path(path).open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        msg = f"Expected mapping in YAML file: {path}"
        raise ValueError(msg)
    return data


def _engine_from_mapping(data: Mapping[str, Any]) -> EngineConfig:
    return EngineConfig(
        timesteps_per_activation=int(data.get("timesteps_per_activation", 1)),
        bounded_output=bool(data.get("bounded_output", False)),
        output_lower=float(data.get("output_lower", 0.0)),
        output_upper=float(data.get("output_upper", 1.0)),
    )


def load_engine_config(path: Path) -> EngineConfig:
    return _engine_from_mapping(_load_yaml(path))


def load_benchmark_config(path: Path) -> BenchmarkConfig:
    data = _load_yaml(path)
    engine_data = data.get("engine") or {}
    if not isinstance(engine_data, Mapping):
        msg = f"'engine' section must be a mapping in {path}"
        raise ValueError(msg)
    raw_activations = data.get("activations")
    activations = (
        tuple(str(name) for name in raw_activations)
        if raw_activations
        else _default_benchmark_activations()
    )
    return BenchmarkConfig(
        input_count=int(data.get("input_count", 8)),
        output_count=int(data.get("output_count", 4)),
        hidden_count=int(data.get("hidden_count", 64)),
        connections_per_neuron=float(data.get("connections_per_neuron", 4.0)),
        activations=activations,
        activations_per_measurement=int(
            data.get("activations_per_measurement", 10_000)
        ),
        repeats=int(data.get("repeats", 3)),
        seed=(int(data["seed"]) if data.get("seed") is not None else None),
        engine=_engine_from_mapping(engine_data),
    )


__all__ = [
    "BenchmarkConfig",
    "EngineConfig",
    "load_benchmark_config",
    "load_engine_config",
]
