import math

import numpy as np
import pytest

from sigmanet.core.activations import sigmoid_derivative
from sigmanet.core.errors import FormatError, NetworkStateError, SizeMismatchError
from sigmanet.core.network import LEARNING_RATE, Network
from sigmanet.core.types import BiasUpdate, LabelMode, NetworkState, NeuronType


def _sigmoid(x):
    return 1.0 / (1.0 + math.exp(-x))


def _network(*args, seed=0, **kwargs):
    return Network(*args, rng=np.random.default_rng(seed), **kwargs)


def test_default_layer_sizes_and_state():
    net = _network(5)
    assert len(net.hidden_layer) == 12
    assert len(net.output_layer) == 1
    assert net.input_layer == []
    assert net.state is NetworkState.UNBUILT
    assert net.learning_rate == LEARNING_RATE == 0.0005
    assert net.loss == 1.0
    assert net.is_trained is False
    assert all(n.type is NeuronType.HIDDEN for n in net.hidden_layer)
    assert all(n.type is NeuronType.OUTPUT for n in net.output_layer)
    assert all(0.0 <= n.bias < 1.0 for n in net.hidden_layer + net.output_layer)


@pytest.mark.parametrize("sizes", [(0, 2, 1), (3, 0, 1), (3, 2, 0), (-1, 2, 1), (2.5, 2, 1), (True, 2, 1)])
def test_rejects_invalid_sizes(sizes):
    with pytest.raises(ValueError):
        Network(*sizes)


def test_rejects_invalid_options():
    with pytest.raises(ValueError):
        Network(3, learning_rate=0.0)
    with pytest.raises(ValueError):
        Network(3, label_mode="bogus")
    with pytest.raises(ValueError):
        Network(3, bias_update="bogus")
    with pytest.raises(ValueError):
        Network(1, label_mode=LabelMode.EXCLUDED)


def test_first_record_builds_fully_connected_topology():
    net = _network(3, 2, 1)
    net.initialize(["0.0", "1.0", "1"])
    assert net.state is NetworkState.BUILT
    assert [n.activation for n in net.input_layer] == [0.0, 1.0, 1.0]
    assert all(n.type is NeuronType.INPUT and n.incoming == [] for n in net.input_layer)
    assert net.target_value == 1.0
    assert net.synapse_count == 3 * 2 + 2 * 1
    for hidden in net.hidden_layer:
        assert [s.source for s in hidden.incoming] == net.input_layer
        assert all(s.destination is hidden for s in hidden.incoming)
        assert all(0.0 <= s.weight < 1.0 for s in hidden.incoming)
    for output in net.output_layer:
        assert [s.source for s in output.incoming] == net.hidden_layer


def test_label_can_be_excluded_from_input_layer():
    net = _network(3, 2, 1, label_mode="excluded")
    net.initialize(["0.25", "0.5", "1"])
    assert net.feature_count == 2
    assert [n.activation for n in net.input_layer] == [0.25, 0.5]
    assert net.target_value == 1.0
    assert net.synapse_count == 2 * 2 + 2 * 1
    assert all(len(h.incoming) == 2 for h in net.hidden_layer)


def test_label_feeds_hidden_layer_in_feature_mode():
    net = _network(3, 2, 1)
    net.initialize(["0.25", "0.5", "1"])
    label_neuron = net.input_layer[-1]
    assert label_neuron.activation == net.target_value
    assert all(h.incoming[-1].source is label_neuron for h in net.hidden_layer)


def test_subsequent_records_reuse_topology():
    net = _network(3, 4, 2)
    net.initialize(["0.1", "0.2", "0"])
    inputs = list(net.input_layer)
    synapses = list(net.synapses())
    for _ in range(5):
        net.initialize(["0.3", "-0.4", "1"])
    assert net.synapse_count == len(synapses) == 3 * 4 + 4 * 2
    assert all(a is b for a, b in zip(net.input_layer, inputs))
    assert all(a is b for a, b in zip(net.synapses(), synapses))
    assert [n.activation for n in net.input_layer] == [0.3, -0.4, 1.0]
    assert net.target_value == 1.0


def test_size_mismatch_is_raised_before_building():
    net = _network(3, 2, 1)
    with pytest.raises(SizeMismatchError) as info:
        net.initialize(["1.0", "0"])
    assert info.value.expected == 3
    assert info.value.actual == 2
    assert net.state is NetworkState.UNBUILT
    with pytest.raises(SizeMismatchError):
        net.initialize(["1.0", "2.0", "3.0", "0"])


@pytest.mark.parametrize("bad", ["abc", "1,5", "1_0", "", None])
def test_format_error_names_the_field(bad):
    net = _network(3, 2, 1)
    with pytest.raises(FormatError) as info:
        net.initialize(["0.5", bad, "1"])
    assert info.value.index == 1
    assert net.state is NetworkState.UNBUILT


def test_failed_record_leaves_built_network_untouched():
    net = _network(3, 2, 1)
    net.initialize(["0.5", "0.25", "1"])
    with pytest.raises(FormatError):
        net.initialize(["9", "9", "oops"])
    assert [n.activation for n in net.input_layer] == [0.5, 0.25, 1.0]
    assert net.target_value == 1.0


def test_invariant_culture_literals_are_accepted():
    net = _network(4, 2, 1)
    net.initialize(["-1.5e-1", " 2.0 ", "3", "1"])
    assert [n.activation for n in net.input_layer] == [-0.15, 2.0, 3.0, 1.0]


def test_lifecycle_errors():
    net = _network(3, 2, 1)
    with pytest.raises(NetworkStateError):
        net.feedforward()
    with pytest.raises(NetworkStateError):
        net.backpropagate()
    with pytest.raises(NetworkStateError):
        net.parameters()
    net.build()
    assert net.state is NetworkState.BUILT
    assert [n.activation for n in net.input_layer] == [0.0, 0.0, 0.0]
    with pytest.raises(NetworkStateError):
        net.build()


def test_feedforward_reports_first_output():
    net = _network(3, 2, 2)
    net.initialize(["0.0", "1.0", "1"])
    forward = net.feedforward()
    assert len(forward.hidden_activations) == 2
    assert len(forward.output_activations) == 2
    assert forward.predicted_value == net.output_layer[0].activation
    assert net.predicted_value == forward.output_activations[0]
    for hidden, activation in zip(net.hidden_layer, forward.hidden_activations):
        expected = _sigmoid(sum(s.weight * s.source.activation for s in hidden.incoming) + hidden.bias)
        assert activation == pytest.approx(expected)
        assert all(
            s.weighted_contribution == pytest.approx(s.weight * s.source.activation)
            for s in hidden.incoming
        )


def test_repeated_feedforward_is_deterministic():
    net = _network(3, 5, 1, seed=4)
    net.initialize(["0.3", "0.9", "1"])
    first = net.feedforward()
    contributions = [s.weighted_contribution for s in net.synapses()]
    for _ in range(4):
        again = net.feedforward()
        assert again.predicted_value == first.predicted_value
        assert again.hidden_activations == first.hidden_activations
        assert again.output_activations == first.output_activations
        assert [s.weighted_contribution for s in net.synapses()] == contributions
    assert net.predicted_value == first.predicted_value


def test_last_output_neuron_sets_hidden_derivatives():
    net = _network(3, 2, 2, seed=8, learning_rate=0.1)
    net.initialize(["0.2", "0.6", "1"])
    net.feedforward()
    g = net.compute_loss_gradient()
    first, last = net.output_layer
    last_weights = [s.weight for s in last.incoming]
    first_weights = [s.weight for s in first.incoming]
    biases = [n.bias for n in net.output_layer]

    backward = net.backpropagate()

    slope = sigmoid_derivative(last.activation)
    expected = tuple(slope * w * g for w in last_weights)
    assert backward.hidden_derivatives == pytest.approx(expected)
    assert tuple(n.derivative for n in net.hidden_layer) == pytest.approx(expected)
    overwritten = tuple(sigmoid_derivative(first.activation) * w * g for w in first_weights)
    assert backward.hidden_derivatives != pytest.approx(overwritten)
    for neuron, before in zip(net.output_layer, biases):
        assert neuron.bias == pytest.approx(before - 0.1 * g * len(neuron.incoming))


def test_loss_and_gradient_are_cached():
    net = _network(3, 2, 1)
    net.predicted_value = 0.8
    net.target_value = 1.0
    assert net.compute_loss() == pytest.approx(0.02)
    assert net.loss == pytest.approx(0.02)
    assert net.compute_loss_gradient() == pytest.approx(-0.2)
    assert net.loss_gradient == pytest.approx(-0.2)


def _hand_network(bias_update):
    net = _network(3, 1, 1, learning_rate=0.1, bias_update=bias_update)
    net.initialize(["0.5", "-1.0", "1"])
    hidden = net.hidden_layer[0]
    output = net.output_layer[0]
    for synapse, weight in zip(hidden.incoming, (0.2, -0.4, 0.3)):
        synapse.weight = weight
    hidden.bias = 0.1
    output.incoming[0].weight = 0.3
    output.bias = -0.2
    return net


@pytest.mark.parametrize("bias_update", list(BiasUpdate))
def test_backpropagate_applies_update_rules(bias_update):
    net = _hand_network(bias_update)
    net.feedforward()
    net.compute_loss()
    g = net.compute_loss_gradient()
    lr = 0.1

    h = _sigmoid(0.2 * 0.5 - 0.4 * -1.0 + 0.3 * 1.0 + 0.1)
    o = _sigmoid(0.3 * h - 0.2)
    assert net.predicted_value == pytest.approx(o)
    assert g == pytest.approx(o - 1.0)

    backward = net.backpropagate()
    d = o * (1 - o) * 0.3 * g
    assert backward.loss_gradient == g
    assert backward.hidden_derivatives == pytest.approx((d,))
    assert net.hidden_layer[0].derivative == pytest.approx(d)

    hidden = net.hidden_layer[0]
    output = net.output_layer[0]
    assert output.incoming[0].weight == pytest.approx(0.3 - lr * g * h * (1 - h))
    expected_hidden = [w - lr * x * d for w, x in zip((0.2, -0.4, 0.3), (0.5, -1.0, 1.0))]
    assert [s.weight for s in hidden.incoming] == pytest.approx(expected_hidden)

    repeats = 3 if bias_update is BiasUpdate.PER_SYNAPSE else 1
    assert hidden.bias == pytest.approx(0.1 - repeats * lr * d)
    assert output.bias == pytest.approx(-0.2 - lr * g)


def test_per_synapse_bias_update_scales_with_fan_in():
    nets = {mode: _network(3, 4, 1, seed=9, bias_update=mode) for mode in BiasUpdate}
    before = {}
    for mode, net in nets.items():
        net.initialize(["0.5", "0.5", "0"])
        before[mode] = net.parameters()
        net.feedforward()
        net.compute_loss_gradient()
        net.backpropagate()
    shift = {
        mode: before[mode]["output_bias"] - net.parameters()["output_bias"]
        for mode, net in nets.items()
    }
    np.testing.assert_allclose(
        shift[BiasUpdate.PER_SYNAPSE], 4 * shift[BiasUpdate.PER_NEURON], rtol=1e-9
    )


def test_is_trained_is_caller_managed():
    net = _network(3, 2, 1)
    net.initialize(["0", "1", "1"])
    net.feedforward()
    net.compute_loss()
    net.compute_loss_gradient()
    net.backpropagate()
    assert net.is_trained is False
    net.is_trained = True
    net.initialize(["0", "1", "1"])
    assert net.is_trained is True


def test_seeded_networks_are_identical():
    first = _network(4, 3, 1, seed=42)
    second = _network(4, 3, 1, seed=42)
    for net in (first, second):
        net.initialize(["0.1", "0.2", "0.3", "1"])
    a, b = first.parameters(), second.parameters()
    assert set(a) == {"hidden_weights", "hidden_bias", "output_weights", "output_bias"}
    assert a["hidden_weights"].shape == (3, 4)
    assert a["output_weights"].shape == (1, 3)
    for key in a:
        np.testing.assert_array_equal(a[key], b[key])


def test_describe_and_repr():
    net = _network(3, 2, 1, label_mode="excluded")
    info = net.describe()
    assert info["feature_count"] == 2
    assert info["synapses"] == 2 * 2 + 2
    assert info["label_mode"] == "excluded"
    assert "state=unbuilt" in repr(net)
