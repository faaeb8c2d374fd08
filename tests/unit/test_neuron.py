import pytest

from sigmanet.core.activations import sigmoid
from sigmanet.core.errors import NetworkStateError
from sigmanet.core.neuron import Neuron, Synapse
from sigmanet.core.types import NeuronType


def test_synapse_caches_weighted_contribution():
    source = Neuron(NeuronType.INPUT, activation=2.0)
    destination = Neuron(NeuronType.HIDDEN)
    synapse = Synapse(source, destination, weight=0.25)
    assert synapse.weighted_contribution == 0.0
    assert synapse.transmit() == pytest.approx(0.5)
    assert synapse.weighted_contribution == pytest.approx(0.5)


@pytest.mark.parametrize(
    "source_type, destination_type",
    [
        (NeuronType.INPUT, NeuronType.OUTPUT),
        (NeuronType.HIDDEN, NeuronType.INPUT),
        (NeuronType.HIDDEN, NeuronType.HIDDEN),
        (NeuronType.OUTPUT, NeuronType.HIDDEN),
    ],
)
def test_synapse_rejects_non_adjacent_layers(source_type, destination_type):
    with pytest.raises(ValueError):
        Synapse(Neuron(source_type), Neuron(destination_type), weight=0.1)


def test_neuron_activation_uses_cached_contributions_and_bias():
    inputs = [Neuron(NeuronType.INPUT, activation=v) for v in (1.0, -2.0)]
    hidden = Neuron(NeuronType.HIDDEN, bias=0.3)
    hidden.incoming = [
        Synapse(inputs[0], hidden, weight=0.5),
        Synapse(inputs[1], hidden, weight=0.1),
    ]
    # Stale caches are used until the synapses transmit again.
    assert hidden.activate() == pytest.approx(sigmoid(0.3))
    for synapse in hidden.incoming:
        synapse.transmit()
    assert hidden.net_input() == pytest.approx(0.5 - 0.2 + 0.3)
    assert hidden.activate() == pytest.approx(sigmoid(0.6))
    assert hidden.activation == pytest.approx(sigmoid(0.6))


def test_input_neurons_cannot_activate():
    with pytest.raises(NetworkStateError):
        Neuron(NeuronType.INPUT, activation=1.0).activate()


def test_neuron_type_ordering():
    assert NeuronType.INPUT < NeuronType.HIDDEN < NeuronType.OUTPUT
