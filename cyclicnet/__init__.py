"""Heterogeneous cyclic network phenotypes for neuroevolution."""

from __future__ import annotations

from .activations import (
    ActivationFunction,
    ActivationFunctionId,
    ActivationFunctionLibrary,
    ActivationFunctionNotFoundError,
    default_library,
    exp_approx,
    logistic_approximant_steep,
    softsign_steep,
)
from .benchmark import random_definition, run_benchmark
from .config import (
    BenchmarkConfig,
    EngineConfig,
    load_benchmark_config,
    load_engine_config,
)
from .metrics import MetricsRow, MetricsWriter, read_metrics
from .network import (
    BlackBox,
    Connection,
    CyclicNetwork,
    InvalidTopologyError,
    NetworkDefinition,
    sort_connections,
    validate_connection_order,
    validate_topology,
)
from .reporters import EventLogger
from .signals import BoundedSignalView, SignalView

__all__ = [
    "ActivationFunction",
    "ActivationFunctionId",
    "ActivationFunctionLibrary",
    "ActivationFunctionNotFoundError",
    "default_library",
    "exp_approx",
    "logistic_approximant_steep",
    "softsign_steep",
    "SignalView",
    "BoundedSignalView",
    "Connection",
    "CyclicNetwork",
    "BlackBox",
    "InvalidTopologyError",
    "NetworkDefinition",
    "sort_connections",
    "validate_connection_order",
    "validate_topology",
    "EngineConfig",
    "BenchmarkConfig",
    "load_engine_config",
    "load_benchmark_config",
    "EventLogger",
    "MetricsRow",
    "MetricsWriter",
    "read_metrics",
    "random_definition",
    "run_benchmark",
]
