"""Heterogeneous cyclic (recurrent) network engine.

Neuron signals live in two flat lists, ``pre_activation`` and
``post_activation``, laid out as::

    [bias | inputs ... | outputs ... | hidden ...]

Each timestep of :meth:`CyclicNetwork.activate` is two passes:

1. Propagation. Every connection adds ``post[source] * weight`` into
   ``pre[target]``. Connections are sorted by source, so the reads walk
   ``post`` in order and only the scattered writes to ``pre`` jump around.
2. Activation. Every output and hidden neuron maps its accumulated
   ``pre`` value through its own activation function into ``post`` and
   clears ``pre`` for the next timestep.

The passes stay separate; merging them would let a neuron read a target
that has already been updated within the same timestep.
"""

from __future__ import annotations

import operator
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from .activations import (
    ActivationFunction,
    ActivationFunctionId,
    ActivationFunctionLibrary,
)
from .config import EngineConfig
from .signals import BoundedSignalView, SignalView

BIAS_INDEX = 0
BIAS_SIGNAL = 1.0


class InvalidTopologyError(ValueError):
    """Raised when network construction arguments violate a precondition."""


@dataclass(frozen=True, slots=True)
class Connection:
    """Weighted directed connection between two neuron indices."""

    source: int
    target: int
    weight: float

    def __post_init__(self) -> None:
        for field_name, value in (("source", self.source), ("target", self.target)):
            try:
                index = operator.index(value)
            except TypeError as error:
                msg = f"{field_name} must be an integer index, got {value!r}"
                raise ValueError(msg) from error
            if index < 0:
                msg = f"{field_name} must be non-negative."
                raise ValueError(msg)
            object.__setattr__(self, field_name, index)
        try:
            weight = float(self.weight)
        except (TypeError, ValueError) as error:
            msg = f"weight must be convertible to float, got {self.weight!r}"
            raise ValueError(msg) from error
        object.__setattr__(self, "weight", weight)


class BlackBox(Protocol):
    """Surface a fitness evaluator uses to drive a phenotype."""

    @property
    def input_count(self) -> int: ...

    @property
    def output_count(self) -> int: ...

    @property
    def input_signals(self) -> SignalView: ...

    @property
    def output_signals(self) -> SignalView: ...

    def activate(self) -> None: ...

    def reset_state(self) -> None: ...


def sort_connections(connections: Iterable[Connection]) -> list[Connection]:
    """Return connections ordered by source index (stable for equal sources)."""
    return sorted(connections, key=lambda connection: connection.source)


def validate_topology(
    connections: Sequence[Connection],
    activation_functions: Sequence[ActivationFunction | None],
    *,
    input_count: int,
    output_count: int,
    hidden_count: int,
    timesteps_per_activation: int,
) -> int:
    """Check construction preconditions and return the neuron count."""
    for label, value in (
        ("input_count", input_count),
        ("output_count", output_count),
        ("hidden_count", hidden_count),
    ):
        if value < 0:
            msg = f"{label} must be non-negative."
            raise InvalidTopologyError(msg)
    if timesteps_per_activation < 1:
        msg = "timesteps_per_activation must be at least 1."
        raise InvalidTopologyError(msg)

    neuron_count = 1 + input_count + output_count + hidden_count
    if len(activation_functions) != neuron_count:
        msg = (
            f"Expected {neuron_count} activation functions "
            f"but received {len(activation_functions)}."
        )
        raise InvalidTopologyError(msg)

    first_computed = 1 + input_count
    for index in range(first_computed, neuron_count):
        if not callable(activation_functions[index]):
            msg = f"Neuron {index} has no callable activation function."
            raise InvalidTopologyError(msg)

    for position, connection in enumerate(connections):
        source, target = connection.source, connection.target
        if not 0 <= source < neuron_count or not 0 <= target < neuron_count:
            msg = (
                f"Connection {position} ({source} -> {target}) references a "
                f"neuron outside [0, {neuron_count})."
            )
            raise InvalidTopologyError(msg)

    return neuron_count


def validate_connection_order(
    connections: Sequence[Connection],
    input_count: int,
) -> None:
    """Check the ordering and target rules a genome decoder must uphold.

    Connections must be sorted by source index and may only target output
    or hidden neurons.
    """
    first_computed = 1 + input_count
    previous_source = 0
    for position, connection in enumerate(connections):
        source, target = connection.source, connection.target
        if target < first_computed:
            msg = (
                f"Connection {position} targets neuron {target}, which is the "
                "bias or an input neuron."
            )
            raise InvalidTopologyError(msg)
        if source < previous_source:
            msg = (
                f"Connections must be sorted by source index; connection "
                f"{position} has source {source} after {previous_source}."
            )
            raise InvalidTopologyError(msg)
        previous_source = source


class CyclicNetwork:
    """Recurrent network with a per-neuron activation function.

    The network is stateful: each :meth:`activate` call continues from the
    signals left by the previous one until :meth:`reset_state` is called.
    Instances are not thread-safe; give each concurrent evaluation its own.
    """

    __slots__ = (
        "_connections",
        "_activation_table",
        "_pre_activation",
        "_post_activation",
        "_input_signals",
        "_output_signals",
        "_pre_view",
        "_post_view",
        "_input_count",
        "_output_count",
        "_hidden_count",
        "_first_computed",
        "_timesteps_per_activation",
    )

    def __init__(
        self,
        connections: Sequence[Connection],
        activation_functions: Sequence[ActivationFunction],
        *,
        input_count: int,
        output_count: int,
        hidden_count: int = 0,
        timesteps_per_activation: int = 1,
        bounded_output: bool = False,
        output_bounds: tuple[float, float] = (0.0, 1.0),
    ) -> None:
        neuron_count = validate_topology(
            connections,
            activation_functions,
            input_count=input_count,
            output_count=output_count,
            hidden_count=hidden_count,
            timesteps_per_activation=timesteps_per_activation,
        )
        first_computed = 1 + input_count

        self._connections = tuple(
            (connection.source, connection.target, connection.weight)
            for connection in connections
        )
        self._activation_table = tuple(
            (index, activation_functions[index])
            for index in range(first_computed, neuron_count)
        )

        self._pre_activation = [0.0] * neuron_count
        self._post_activation = [0.0] * neuron_count
        self._post_activation[BIAS_INDEX] = BIAS_SIGNAL

        self._input_signals = SignalView(self._post_activation, 1, input_count)
        if bounded_output:
            lower, upper = output_bounds
            self._output_signals: SignalView = BoundedSignalView(
                self._post_activation,
                first_computed,
                output_count,
                lower=lower,
                upper=upper,
            )
        else:
            self._output_signals = SignalView(
                self._post_activation, first_computed, output_count
            )
        self._pre_view = SignalView(self._pre_activation, 0, neuron_count)
        self._post_view = SignalView(self._post_activation, 0, neuron_count)

        self._input_count = input_count
        self._output_count = output_count
        self._hidden_count = hidden_count
        self._first_computed = first_computed
        self._timesteps_per_activation = timesteps_per_activation

    @classmethod
    def from_definition(
        cls,
        definition: NetworkDefinition,
        *,
        library: ActivationFunctionLibrary,
        config: EngineConfig | None = None,
    ) -> CyclicNetwork:
        """Resolve a decoded definition against ``library`` and build a network.

        Unknown activation identifiers raise
        :class:`~cyclicnet.activations.ActivationFunctionNotFoundError` before
        any network state is allocated. Without ``config`` the defaults of
        :class:`~cyclicnet.config.EngineConfig` apply, which match the
        constructor's: one timestep and unbounded output.
        """
        validate_connection_order(definition.connections, definition.input_count)
        engine_config = config or EngineConfig()
        first_computed = 1 + definition.input_count
        activation_functions: list[ActivationFunction] = [_unused_activation] * (
            first_computed
        )
        activation_functions.extend(
            library.resolve(definition.activations[first_computed:])
        )
        return cls(
            definition.connections,
            activation_functions,
            input_count=definition.input_count,
            output_count=definition.output_count,
            hidden_count=definition.hidden_count,
            timesteps_per_activation=engine_config.timesteps_per_activation,
            bounded_output=engine_config.bounded_output,
            output_bounds=engine_config.output_bounds,
        )

    @property
    def input_count(self) -> int:
        return self._input_count

    @property
    def output_count(self) -> int:
        return self._output_count

    @property
    def hidden_count(self) -> int:
        return self._hidden_count

    @property
    def neuron_count(self) -> int:
        return len(self._post_activation)

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    @property
    def timesteps_per_activation(self) -> int:
        return self._timesteps_per_activation

    @property
    def input_signals(self) -> SignalView:
        """Writable view over the input neurons' signals."""
        return self._input_signals

    @property
    def output_signals(self) -> SignalView:
        """View over the output neurons' signals, bounded if configured."""
        return self._output_signals

    @property
    def pre_activation(self) -> SignalView:
        """Raw view over every neuron's accumulated input."""
        return self._pre_view

    @property
    def post_activation(self) -> SignalView:
        """Raw view over every neuron's output signal, bias included."""
        return self._post_view

    def activate(self) -> None:
        """Run ``timesteps_per_activation`` propagation/activation passes."""
        pre = self._pre_activation
        post = self._post_activation
        connections = self._connections
        activation_table = self._activation_table

        for _ in range(self._timesteps_per_activation):
            for source, target, weight in connections:
                pre[target] += post[source] * weight

            for index, function in activation_table:
                post[index] = function(pre[index])
                pre[index] = 0.0

    def reset_state(self) -> None:
        """Zero the signals of every output and hidden neuron."""
        # Input signals belong to the caller and the bias is fixed.
        start = self._first_computed
        count = len(self._post_activation) - start
        self._pre_activation[start:] = [0.0] * count
        self._post_activation[start:] = [0.0] * count


def _unused_activation(x: float) -> float:
    # Placeholder for bias and input slots; never invoked by activate().
    return x


@dataclass(frozen=True, slots=True)
class NetworkDefinition:
    """Decoded topology handed over by a genome decoder.

    ``activations`` holds one identifier per neuron index; entries for the
    bias and input neurons are ignored.
    """

    connections: tuple[Connection, ...]
    activations: tuple[str, ...]
    input_count: int
    output_count: int
    hidden_count: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "connections", tuple(self.connections))
        object.__setattr__(
            self,
            "activations",
            tuple(
                name.value if isinstance(name, ActivationFunctionId) else str(name)
                for name in self.activations
            ),
        )
        for label, value in (
            ("input_count", self.input_count),
            ("output_count", self.output_count),
            ("hidden_count", self.hidden_count),
        ):
            if value < 0:
                msg = f"{label} must be non-negative."
                raise InvalidTopologyError(msg)
        if len(self.activations) != self.neuron_count:
            msg = (
                f"Expected {self.neuron_count} activation identifiers "
                f"but received {len(self.activations)}."
            )
            raise InvalidTopologyError(msg)

    @property
    def neuron_count(self) -> int:
        return 1 + self.input_count + self.output_count + self.hidden_count


__all__ = [
    "BIAS_INDEX",
    "BIAS_SIGNAL",
    "BlackBox",
    "Connection",
    "CyclicNetwork",
    "InvalidTopologyError",
    "NetworkDefinition",
    "sort_connections",
    "validate_connection_order",
    "validate_topology",
]
