"""Benchmark helpers to measure network activation throughput."""

from __future__ import annotations

from random import Random
from time import perf_counter

from .activations import ActivationFunctionId, ActivationFunctionLibrary, default_library
from .config import BenchmarkConfig
from .metrics import MetricsRow, MetricsWriter
from .network import Connection, CyclicNetwork, NetworkDefinition
from .reporters import EventLogger


def random_definition(rng: Random, config: BenchmarkConfig) -> NetworkDefinition:
    """Build a random, possibly cyclic definition shaped by ``config``.

    Sources are drawn from every neuron (bias included) and targets from the
    output and hidden neurons, so self-loops and cycles occur naturally.
    """
    first_computed = 1 + config.input_count
    neuron_count = first_computed + config.output_count + config.hidden_count
    computed = neuron_count - first_computed

    pairs: set[tuple[int, int]] = set()
    if computed > 0:
        wanted = min(
            round(config.connections_per_neuron * computed),
            neuron_count * computed,
        )
        while len(pairs) < wanted:
            source = rng.randrange(neuron_count)
            target = rng.randrange(first_computed, neuron_count)
            pairs.add((source, target))

    connections = [
        Connection(source, target, rng.uniform(-1.0, 1.0))
        for source, target in sorted(pairs)
    ]
    activations = [ActivationFunctionId.IDENTITY.value] * first_computed
    activations.extend(rng.choice(config.activations) for _ in range(computed))
    return NetworkDefinition(
        connections=tuple(connections),
        activations=tuple(activations),
        input_count=config.input_count,
        output_count=config.output_count,
        hidden_count=config.hidden_count,
    )


def run_benchmark(
    config: BenchmarkConfig,
    *,
    library: ActivationFunctionLibrary | None = None,
    logger: EventLogger | None = None,
    metrics: MetricsWriter | None = None,
) -> list[MetricsRow]:
    """Time ``activate()`` on ``config.repeats`` freshly generated networks."""
    if library is None:
        library = default_library()
    rng = Random(config.seed if config.seed is not None else 0)

    results: list[MetricsRow] = []
    for repeat in range(config.repeats):
        definition = random_definition(rng, config)
        network = CyclicNetwork.from_definition(
            definition, library=library, config=config.engine
        )
        inputs = network.input_signals
        for position in range(len(inputs)):
            inputs[position] = rng.uniform(-1.0, 1.0)

        if logger is not None:
            logger.log(
                "benchmark_start",
                repeat=repeat,
                neurons=network.neuron_count,
                connections=network.connection_count,
            )

        activate = network.activate
        start = perf_counter()
        for _ in range(config.activations_per_measurement):
            activate()
        duration = perf_counter() - start

        throughput = (
            config.activations_per_measurement / duration if duration > 0.0 else 0.0
        )
        row = MetricsRow(
            repeat=repeat,
            neuron_count=network.neuron_count,
            connection_count=network.connection_count,
            timesteps_per_activation=network.timesteps_per_activation,
            activations=config.activations_per_measurement,
            duration_s=duration,
            activations_per_sec=throughput,
        )
        results.append(row)
        if metrics is not None:
            metrics.append(row)
        if logger is not None:
            logger.log(
                "benchmark_done",
                repeat=repeat,
                duration_s=duration,
                activations_per_sec=throughput,
            )
    return results


__all__ = ["random_definition", "run_benchmark"]
