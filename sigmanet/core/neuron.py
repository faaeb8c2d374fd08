"""Neurons and the synapses connecting them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .activations import sigmoid
from .errors import NetworkStateError
from .types import NeuronType


@dataclass(eq=False)
class Neuron:
    """A single unit of the network.

    Input neurons hold a feature value in ``activation`` and never have
    incoming synapses. Hidden and output neurons compute ``activation`` from
    their incoming weighted contributions and ``bias``.
    """

    type: NeuronType
    bias: float = 0.0
    activation: float = 0.0
    derivative: float = 0.0
    incoming: List["Synapse"] = field(default_factory=list, repr=False)

    def net_input(self) -> float:
        total = 0.0
        for synapse in self.incoming:
            total += synapse.weighted_contribution
        return total + self.bias

    def activate(self) -> float:
        """Recompute and return ``sigmoid(net_input)``."""

        if self.type is NeuronType.INPUT:
            raise NetworkStateError("Input neurons are set from feature values")
        self.activation = float(sigmoid(self.net_input()))
        return self.activation


@dataclass(eq=False)
class Synapse:
    """Directed weighted edge between neurons of adjacent layers."""

    source: Neuron = field(repr=False)
    destination: Neuron = field(repr=False)
    weight: float = 0.0
    weighted_contribution: float = 0.0

    def __post_init__(self) -> None:
        if self.destination.type.value - self.source.type.value != 1:
            raise ValueError(
                "Synapses connect adjacent layers only, got "
                f"{self.source.type.name} -> {self.destination.type.name}"
            )

    def transmit(self) -> float:
        """Cache and return ``weight * source.activation``."""

        self.weighted_contribution = self.weight * self.source.activation
        return self.weighted_contribution


__all__ = ["Neuron", "Synapse"]
