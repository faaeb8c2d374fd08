"""Core numerical primitives for SigmaNet."""

from . import activations, errors, fields, losses, types
from .network import LEARNING_RATE, Network
from .neuron import Neuron, Synapse

__all__ = [
    "LEARNING_RATE",
    "Network",
    "Neuron",
    "Synapse",
    "activations",
    "errors",
    "fields",
    "losses",
    "types",
]
