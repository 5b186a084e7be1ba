from __future__ import annotations

import math
from random import Random

import pytest
from cyclicnet.activations import (
    ActivationFunctionNotFoundError,
    default_library,
    identity,
    softsign_steep,
)
from cyclicnet.benchmark import random_definition
from cyclicnet.config import BenchmarkConfig, EngineConfig
from cyclicnet.network import (
    BIAS_INDEX,
    BlackBox,
    Connection,
    CyclicNetwork,
    InvalidTopologyError,
    NetworkDefinition,
    sort_connections,
    validate_connection_order,
)
from cyclicnet.signals import BoundedSignalView


def _identity_network(
    connections: list[Connection],
    *,
    inputs: int,
    outputs: int,
    hidden: int = 0,
    timesteps: int = 1,
    bounded: bool = False,
) -> CyclicNetwork:
    neuron_count = 1 + inputs + outputs + hidden
    return CyclicNetwork(
        connections,
        [identity] * neuron_count,
        input_count=inputs,
        output_count=outputs,
        hidden_count=hidden,
        timesteps_per_activation=timesteps,
        bounded_output=bounded,
    )


def test_single_connection_scales_input() -> None:
    network = _identity_network([Connection(1, 2, 2.0)], inputs=1, outputs=1)

    network.input_signals[0] = 3.0
    network.activate()

    assert network.output_signals[0] == 6.0


def test_bounded_output_clamps_reads_only() -> None:
    network = _identity_network([Connection(1, 2, 2.0)], inputs=1, outputs=1, bounded=True)

    network.input_signals[0] = 3.0
    network.activate()

    assert isinstance(network.output_signals, BoundedSignalView)
    assert network.output_signals[0] == 1.0
    assert network.post_activation[2] == 6.0


def test_self_loop_decays_across_internal_timesteps() -> None:
    network = _identity_network(
        [Connection(1, 1, 0.5)], inputs=0, outputs=0, hidden=1, timesteps=3
    )
    network.post_activation[1] = 1.0

    network.activate()

    assert network.post_activation[1] == 0.125


def test_self_loop_state_carries_between_calls() -> None:
    network = _identity_network([Connection(1, 1, 0.5)], inputs=0, outputs=0, hidden=1)
    network.post_activation[1] = 1.0

    observed = []
    for _ in range(3):
        network.activate()
        observed.append(network.post_activation[1])

    assert observed == [0.5, 0.25, 0.125]


def test_signal_needs_one_timestep_per_hop() -> None:
    # bias=0, input=1, output=2, hidden=3: input -> hidden -> output.
    network = _identity_network(
        [Connection(1, 3, 1.0), Connection(3, 2, 1.0)], inputs=1, outputs=1, hidden=1
    )
    network.input_signals[0] = 0.7

    network.activate()
    assert network.output_signals[0] == 0.0
    assert network.post_activation[3] == 0.7

    network.activate()
    assert network.output_signals[0] == 0.7


def test_bias_contributes_constant_signal() -> None:
    network = _identity_network(
        [Connection(0, 2, -0.5), Connection(1, 2, 1.0)], inputs=1, outputs=1
    )
    network.input_signals[0] = 2.0
    network.activate()
    assert network.output_signals[0] == 1.5


def test_heterogeneous_activation_functions() -> None:
    network = CyclicNetwork(
        [Connection(1, 2, 1.0), Connection(1, 3, 1.0)],
        [identity, identity, softsign_steep, math.tanh],
        input_count=1,
        output_count=2,
    )
    network.input_signals[0] = 0.2
    network.activate()

    assert network.output_signals[0] == 0.75
    assert network.output_signals[1] == pytest.approx(math.tanh(0.2))


def test_bias_invariant_holds_across_lifecycle() -> None:
    network = _identity_network(
        [Connection(0, 2, 3.0), Connection(2, 2, -1.0), Connection(2, 3, 0.5)],
        inputs=1,
        outputs=1,
        hidden=1,
        timesteps=2,
    )
    assert network.post_activation[BIAS_INDEX] == 1.0
    for _ in range(5):
        network.input_signals[0] = 4.0
        network.activate()
        assert network.post_activation[BIAS_INDEX] == 1.0
    network.reset_state()
    assert network.post_activation[BIAS_INDEX] == 1.0
    network.activate()
    assert network.post_activation[BIAS_INDEX] == 1.0


def test_reset_state_zeroes_hidden_and_outputs() -> None:
    network = _identity_network(
        [Connection(0, 3, 1.0), Connection(1, 2, 1.0), Connection(3, 3, 0.9)],
        inputs=1,
        outputs=1,
        hidden=1,
        timesteps=4,
    )
    network.input_signals[0] = 5.0
    network.activate()
    assert network.output_signals[0] != 0.0

    network.reset_state()

    for index in range(2, network.neuron_count):
        assert network.post_activation[index] == 0.0
        assert network.pre_activation[index] == 0.0
    assert network.post_activation[BIAS_INDEX] == 1.0
    assert network.input_signals[0] == 5.0

    network.reset_state()
    assert network.output_signals[0] == 0.0


def test_pre_activation_cleared_after_each_timestep() -> None:
    # bias=0, output=1, hidden=2: bias -> output -> hidden.
    network = _identity_network(
        [Connection(0, 1, 0.5), Connection(1, 2, 2.0)], inputs=0, outputs=1, hidden=1
    )
    network.activate()
    assert network.post_activation[1] == 0.5
    assert all(value == 0.0 for value in network.pre_activation)

    network.activate()
    assert network.post_activation[2] == 1.0
    assert all(value == 0.0 for value in network.pre_activation)


def test_fresh_network_matches_reset_network() -> None:
    config = BenchmarkConfig(input_count=3, output_count=2, hidden_count=12, seed=7)
    definition = random_definition(Random(11), config)
    library = default_library()
    engine_config = EngineConfig(timesteps_per_activation=2, bounded_output=False)
    sequence = [[0.1 * step, -0.3, 0.5 * step] for step in range(6)]

    def _run(network: CyclicNetwork) -> list[list[float]]:
        outputs = []
        for inputs in sequence:
            network.input_signals.copy_from(inputs)
            network.activate()
            outputs.append(network.output_signals.to_list())
        return outputs

    fresh = CyclicNetwork.from_definition(definition, library=library, config=engine_config)
    expected = _run(fresh)

    reused = CyclicNetwork.from_definition(definition, library=library, config=engine_config)
    for _ in range(4):
        reused.input_signals.copy_from([9.0, -9.0, 3.0])
        reused.activate()
    reused.reset_state()

    assert _run(reused) == expected


def test_connection_order_within_target_does_not_matter() -> None:
    ordered = [
        Connection(0, 3, -0.2),
        Connection(1, 3, 0.3),
        Connection(2, 3, 0.7),
        Connection(3, 3, 0.1),
    ]
    permuted = [ordered[2], ordered[0], ordered[3], ordered[1]]

    results = []
    for connections in (ordered, permuted):
        network = _identity_network(connections, inputs=2, outputs=1, timesteps=3)
        network.input_signals.copy_from([0.9, -1.1])
        network.activate()
        results.append(network.output_signals[0])

    assert results[0] == pytest.approx(results[1], rel=1e-12)


def test_nan_and_infinity_propagate() -> None:
    network = _identity_network(
        [Connection(1, 2, math.nan), Connection(1, 3, math.inf)], inputs=1, outputs=2
    )
    network.input_signals[0] = 1.0
    network.activate()

    assert math.isnan(network.output_signals[0])
    assert network.output_signals[1] == math.inf


def test_network_reports_counts() -> None:
    network = _identity_network(
        [Connection(0, 4, 1.0), Connection(1, 3, 1.0)], inputs=2, outputs=1, hidden=2
    )
    assert network.input_count == 2
    assert network.output_count == 1
    assert network.hidden_count == 2
    assert network.neuron_count == 6
    assert network.connection_count == 2
    assert network.timesteps_per_activation == 1
    assert len(network.input_signals) == 2
    assert len(network.output_signals) == 1


def test_input_and_output_views_bound_positions() -> None:
    network = _identity_network([], inputs=1, outputs=1)
    with pytest.raises(IndexError):
        network.input_signals[1] = 1.0
    with pytest.raises(IndexError):
        network.output_signals[1]


def test_constructor_rejects_malformed_arguments() -> None:
    with pytest.raises(InvalidTopologyError):
        CyclicNetwork([], [identity] * 2, input_count=1, output_count=1)
    with pytest.raises(InvalidTopologyError):
        _identity_network([Connection(1, 5, 1.0)], inputs=1, outputs=1)
    with pytest.raises(InvalidTopologyError):
        _identity_network([], inputs=1, outputs=1, timesteps=0)
    with pytest.raises(InvalidTopologyError):
        _identity_network([], inputs=-1, outputs=1)
    with pytest.raises(InvalidTopologyError):
        CyclicNetwork(
            [],
            [identity, identity, None],  # type: ignore[list-item]
            input_count=1,
            output_count=1,
        )


def test_invalid_topology_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        _identity_network([], inputs=1, outputs=1, timesteps=-3)


def test_connection_validation() -> None:
    connection = Connection(1, 2, 3)
    assert isinstance(connection.weight, float)
    with pytest.raises(ValueError):
        Connection(-1, 2, 1.0)
    with pytest.raises(ValueError):
        Connection(1, -2, 1.0)
    with pytest.raises(ValueError):
        Connection(1, 2, object())  # type: ignore[arg-type]


def test_connection_rejects_non_integer_indices() -> None:
    with pytest.raises(ValueError):
        Connection(1.0, 2, 2.0)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        Connection(1, "2", 2.0)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        CyclicNetwork(
            [Connection(1.5, 2, 2.0)],  # type: ignore[arg-type]
            [identity] * 3,
            input_count=1,
            output_count=1,
        )


def test_connection_accepts_integer_like_indices() -> None:
    class _Index:
        def __index__(self) -> int:
            return 2

    connection = Connection(True, _Index(), 1.0)  # type: ignore[arg-type]
    assert connection.source == 1
    assert connection.target == 2
    assert type(connection.target) is int


def test_sort_connections_is_stable_by_source() -> None:
    connections = [
        Connection(3, 4, 0.1),
        Connection(0, 4, 0.2),
        Connection(3, 5, 0.3),
        Connection(1, 4, 0.4),
    ]
    ordered = sort_connections(connections)
    assert [c.source for c in ordered] == [0, 1, 3, 3]
    assert [c.target for c in ordered] == [4, 4, 4, 5]


def test_validate_connection_order() -> None:
    validate_connection_order([Connection(0, 2, 1.0), Connection(1, 2, 1.0)], 1)
    with pytest.raises(InvalidTopologyError):
        validate_connection_order([Connection(1, 2, 1.0), Connection(0, 2, 1.0)], 1)
    with pytest.raises(InvalidTopologyError):
        validate_connection_order([Connection(0, 1, 1.0)], 1)


def test_from_definition_resolves_identifiers_and_config() -> None:
    definition = NetworkDefinition(
        connections=(Connection(1, 2, 1.0), Connection(2, 3, 2.0)),
        activations=("identity", "identity", "ScaledELU", "identity"),
        input_count=1,
        output_count=1,
        hidden_count=1,
    )
    network = CyclicNetwork.from_definition(
        definition,
        library=default_library(),
        config=EngineConfig(timesteps_per_activation=2, bounded_output=True),
    )
    network.input_signals[0] = 0.2

    network.activate()

    assert network.timesteps_per_activation == 2
    assert network.output_signals[0] == 0.75
    assert network.post_activation[3] == 1.5


def test_from_definition_output_unbounded_by_default() -> None:
    definition = NetworkDefinition(
        connections=(Connection(1, 2, 10.0),),
        activations=("identity", "identity", "identity"),
        input_count=1,
        output_count=1,
    )
    network = CyclicNetwork.from_definition(definition, library=default_library())
    network.input_signals[0] = 1.0
    network.activate()
    assert network.output_signals[0] == 10.0
    assert not isinstance(network.output_signals, BoundedSignalView)


def test_from_definition_unknown_activation_raises_not_found() -> None:
    definition = NetworkDefinition(
        connections=(),
        activations=("identity", "identity", "mystery"),
        input_count=1,
        output_count=1,
    )
    with pytest.raises(ActivationFunctionNotFoundError):
        CyclicNetwork.from_definition(definition, library=default_library())


def test_from_definition_ignores_bias_and_input_identifiers() -> None:
    definition = NetworkDefinition(
        connections=(Connection(1, 2, 1.0),),
        activations=("unused", "unused", "identity"),
        input_count=1,
        output_count=1,
    )
    network = CyclicNetwork.from_definition(definition, library=default_library())
    assert network.neuron_count == 3


def test_from_definition_rejects_unsorted_connections() -> None:
    definition = NetworkDefinition(
        connections=(Connection(2, 2, 1.0), Connection(1, 2, 1.0)),
        activations=("identity", "identity", "identity"),
        input_count=1,
        output_count=1,
    )
    with pytest.raises(InvalidTopologyError):
        CyclicNetwork.from_definition(definition, library=default_library())


def test_definition_checks_identifier_count() -> None:
    with pytest.raises(InvalidTopologyError):
        NetworkDefinition(
            connections=(),
            activations=("identity",),
            input_count=1,
            output_count=1,
        )
    with pytest.raises(InvalidTopologyError):
        NetworkDefinition(
            connections=(),
            activations=("identity",),
            input_count=-1,
            output_count=1,
        )


def _evaluate(box: BlackBox, inputs: list[float]) -> list[float]:
    box.reset_state()
    for position in range(box.input_count):
        box.input_signals[position] = inputs[position]
    box.activate()
    return [box.output_signals[position] for position in range(box.output_count)]


def test_network_drives_through_black_box_surface() -> None:
    network: BlackBox = _identity_network(
        [Connection(1, 3, 1.0), Connection(2, 3, -1.0), Connection(2, 4, 2.0)],
        inputs=2,
        outputs=2,
    )
    assert _evaluate(network, [3.0, 1.0]) == [2.0, 2.0]
    assert _evaluate(network, [0.5, 0.25]) == [0.25, 0.5]
