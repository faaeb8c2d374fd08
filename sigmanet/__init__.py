"""SigmaNet public API."""

from .core import activations, errors, types  # noqa: F401
from .core.errors import FormatError, NetworkStateError, SizeMismatchError
from .core.network import LEARNING_RATE, Network
from .core.neuron import Neuron, Synapse
from .core.types import BiasUpdate, LabelMode, NetworkState, NeuronType
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer

__all__ = [
    "LEARNING_RATE",
    "BiasUpdate",
    "FormatError",
    "LabelMode",
    "Network",
    "NetworkState",
    "NetworkStateError",
    "Neuron",
    "NeuronType",
    "SizeMismatchError",
    "Synapse",
    "Trainer",
    "activations",
    "errors",
    "load_preset",
    "presets",
    "run_pipeline",
    "types",
]
