"""Single hidden layer network trained one record at a time."""

from __future__ import annotations

from typing import Dict, Iterator, List, Mapping, Sequence, Tuple

import numpy as np

from .activations import sigmoid_derivative
from .errors import NetworkStateError, SizeMismatchError
from .fields import parse_fields
from .losses import squared_error, squared_error_gradient
from .neuron import Neuron, Synapse
from .types import (
    Array,
    BackwardPass,
    BiasUpdate,
    ForwardPass,
    LabelMode,
    NetworkState,
    NeuronType,
)

LEARNING_RATE = 0.0005


class Network:
    """Fully connected input -> hidden -> output network with sigmoid units.

    The network is driven one record at a time by the caller::

        net.initialize(fields)
        net.feedforward()
        net.compute_loss()
        net.compute_loss_gradient()
        net.backpropagate()

    Parameters
    ----------
    input_size:
        Number of fields in a record, the trailing label included.
    hidden_size, output_size:
        Layer sizes, fixed for the lifetime of the network.
    rng:
        Source of the uniform ``[0, 1)`` draws used for every initial weight
        and bias. A fresh unseeded generator is used when omitted.
    learning_rate:
        Step size shared by every weight and bias update.
    label_mode:
        Whether the label field is also wired into the input layer
        (:attr:`LabelMode.FEATURE`) or used as the target only.
    bias_update:
        Whether a neuron's bias is decremented once per incoming synapse
        (:attr:`BiasUpdate.PER_SYNAPSE`) or once per backward pass.
    """

    def __init__(
        self,
        input_size: int,
        hidden_size: int = 12,
        output_size: int = 1,
        *,
        rng: np.random.Generator | None = None,
        learning_rate: float = LEARNING_RATE,
        label_mode: LabelMode | str = LabelMode.FEATURE,
        bias_update: BiasUpdate | str = BiasUpdate.PER_SYNAPSE,
    ) -> None:
        for name, value in (
            ("input_size", input_size),
            ("hidden_size", hidden_size),
            ("output_size", output_size),
        ):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
            if value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

        self.label_mode = LabelMode(label_mode)
        self.bias_update = BiasUpdate(bias_update)
        if self.label_mode is LabelMode.EXCLUDED and input_size < 2:
            raise ValueError("input_size must leave room for a feature and the label")
        self.learning_rate = float(learning_rate)
        if not self.learning_rate > 0:
            raise ValueError(f"learning_rate must be positive, got {learning_rate!r}")

        self.input_size = int(input_size)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.state = NetworkState.UNBUILT

        self.input_layer: List[Neuron] = []
        self.hidden_layer: List[Neuron] = [
            Neuron(NeuronType.HIDDEN, bias=self._uniform()) for _ in range(hidden_size)
        ]
        self.output_layer: List[Neuron] = [
            Neuron(NeuronType.OUTPUT, bias=self._uniform()) for _ in range(output_size)
        ]

        self.target_value = 0.0
        self.predicted_value = 0.0
        self.loss = 1.0
        self.loss_gradient = 0.0
        self.is_trained = False

    def __repr__(self) -> str:
        return (
            f"<Network input={self.input_size} hidden={len(self.hidden_layer)} "
            f"output={len(self.output_layer)} state={self.state.value}>"
        )

    # ------------------------------------------------------------------
    # Topology

    @property
    def feature_count(self) -> int:
        """Number of input neurons."""

        if self.label_mode is LabelMode.EXCLUDED:
            return self.input_size - 1
        return self.input_size

    @property
    def synapse_count(self) -> int:
        return sum(len(neuron.incoming) for neuron in self.hidden_layer + self.output_layer)

    def synapses(self) -> Iterator[Synapse]:
        """Yield input->hidden synapses, then hidden->output, destination-major."""

        for neuron in self.hidden_layer:
            yield from neuron.incoming
        for neuron in self.output_layer:
            yield from neuron.incoming

    def build(self) -> None:
        """Allocate the input layer and connect all adjacent layers."""

        if self.state is NetworkState.BUILT:
            raise NetworkStateError("Network topology is already built")
        self.input_layer = [
            Neuron(NeuronType.INPUT, bias=self._uniform())
            for _ in range(self.feature_count)
        ]
        for neuron in self.hidden_layer:
            self._connect(self.input_layer, neuron)
        for neuron in self.output_layer:
            self._connect(self.hidden_layer, neuron)
        self.state = NetworkState.BUILT

    def initialize(self, fields: Sequence[str]) -> None:
        """Load one record, building the topology on the first call.

        The last field is the label and becomes :attr:`target_value`. Size and
        format checks run before anything is mutated.
        """

        if len(fields) != self.input_size:
            raise SizeMismatchError(self.input_size, len(fields))
        values = parse_fields(fields)
        if self.state is NetworkState.UNBUILT:
            self.build()
        for neuron, value in zip(self.input_layer, values[: self.feature_count]):
            neuron.activation = value
        self.target_value = values[-1]

    # ------------------------------------------------------------------
    # Forward pass and loss

    def feedforward(self) -> ForwardPass:
        """Compute hidden then output activations from the current inputs."""

        self._require_built("feedforward")
        hidden = self._propagate(self.hidden_layer)
        output = self._propagate(self.output_layer)
        self.predicted_value = output[0]
        return ForwardPass(
            hidden_activations=hidden,
            output_activations=output,
            predicted_value=self.predicted_value,
        )

    def compute_loss(self) -> float:
        self.loss = float(squared_error(self.predicted_value, self.target_value))
        return self.loss

    def compute_loss_gradient(self) -> float:
        self.loss_gradient = float(
            squared_error_gradient(self.predicted_value, self.target_value)
        )
        return self.loss_gradient

    # ------------------------------------------------------------------
    # Backward pass

    def backpropagate(self) -> BackwardPass:
        """Update every weight and bias from the cached :attr:`loss_gradient`."""

        self._require_built("backpropagate")
        backward = self._distribute_error(self.loss_gradient)
        self._update_output_synapses(backward.loss_gradient)
        self._update_hidden_synapses(backward)
        return backward

    def _distribute_error(self, gradient: float) -> BackwardPass:
        # Each output neuron overwrites the derivative of every hidden neuron.
        derivatives = [neuron.derivative for neuron in self.hidden_layer]
        for output in self.output_layer:
            slope = sigmoid_derivative(output.activation)
            for index, synapse in enumerate(output.incoming):
                synapse.source.derivative = float(slope * synapse.weight * gradient)
                derivatives[index] = synapse.source.derivative
        return BackwardPass(loss_gradient=gradient, hidden_derivatives=tuple(derivatives))

    def _update_output_synapses(self, gradient: float) -> None:
        rate = self.learning_rate
        for neuron in self.output_layer:
            for synapse in neuron.incoming:
                synapse.weight -= rate * (
                    gradient * sigmoid_derivative(synapse.source.activation)
                )
            self._decrement_bias(neuron, rate * gradient)

    def _update_hidden_synapses(self, backward: BackwardPass) -> None:
        rate = self.learning_rate
        for neuron, derivative in zip(self.hidden_layer, backward.hidden_derivatives):
            for synapse in neuron.incoming:
                synapse.weight -= rate * (synapse.source.activation * derivative)
            self._decrement_bias(neuron, rate * derivative)

    def _decrement_bias(self, neuron: Neuron, step: float) -> None:
        repeats = len(neuron.incoming) if self.bias_update is BiasUpdate.PER_SYNAPSE else 1
        for _ in range(repeats):
            neuron.bias -= step

    # ------------------------------------------------------------------
    # Inspection

    def parameters(self) -> Dict[str, Array]:
        """Return a copy of all weights and biases as float64 arrays."""

        self._require_built("parameters")
        return {
            "hidden_weights": self._weight_matrix(self.hidden_layer),
            "hidden_bias": np.array([n.bias for n in self.hidden_layer], dtype=np.float64),
            "output_weights": self._weight_matrix(self.output_layer),
            "output_bias": np.array([n.bias for n in self.output_layer], dtype=np.float64),
        }

    def describe(self) -> Mapping[str, object]:
        hidden = len(self.hidden_layer)
        output = len(self.output_layer)
        return {
            "input_size": self.input_size,
            "feature_count": self.feature_count,
            "hidden_size": hidden,
            "output_size": output,
            "synapses": self.feature_count * hidden + hidden * output,
            "learning_rate": self.learning_rate,
            "label_mode": self.label_mode.value,
            "bias_update": self.bias_update.value,
        }

    # ------------------------------------------------------------------
    # Helpers

    def _uniform(self) -> float:
        return float(self.rng.random())

    def _connect(self, sources: Sequence[Neuron], destination: Neuron) -> None:
        destination.incoming = [
            Synapse(source, destination, weight=self._uniform()) for source in sources
        ]

    def _require_built(self, operation: str) -> None:
        if self.state is not NetworkState.BUILT:
            raise NetworkStateError(
                f"{operation}() needs a built network; call initialize() first"
            )

    @staticmethod
    def _propagate(layer: Sequence[Neuron]) -> Tuple[float, ...]:
        for neuron in layer:
            for synapse in neuron.incoming:
                synapse.transmit()
        return tuple(neuron.activate() for neuron in layer)

    @staticmethod
    def _weight_matrix(layer: Sequence[Neuron]) -> Array:
        return np.array(
            [[synapse.weight for synapse in neuron.incoming] for neuron in layer],
            dtype=np.float64,
        )


__all__ = ["LEARNING_RATE", "Network"]
