"""Core typing contracts for SigmaNet."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

Array = np.ndarray


class NeuronType(int, Enum):
    """Layer a neuron belongs to, ordered from input to output."""

    INPUT = 0
    HIDDEN = 1
    OUTPUT = 2


class NetworkState(str, Enum):
    """Lifecycle of a :class:`~sigmanet.core.network.Network`.

    ``UNBUILT`` networks only know their layer sizes; ``BUILT`` networks own
    the complete neuron/synapse graph.
    """

    UNBUILT = "unbuilt"
    BUILT = "built"


class LabelMode(str, Enum):
    """How the trailing label field of a record is wired.

    ``FEATURE`` keeps the label in the input layer (it feeds the hidden layer
    like any other value); ``EXCLUDED`` uses it as the target only.
    """

    FEATURE = "feature"
    EXCLUDED = "excluded"


class BiasUpdate(str, Enum):
    """Number of bias decrements a neuron receives per backward pass."""

    PER_SYNAPSE = "per_synapse"
    PER_NEURON = "per_neuron"


@dataclass(frozen=True)
class ForwardPass:
    """Activations produced by :meth:`Network.feedforward`."""

    hidden_activations: Tuple[float, ...]
    output_activations: Tuple[float, ...]
    predicted_value: float


@dataclass(frozen=True)
class BackwardPass:
    """Error signal distributed onto the hidden layer by backpropagation."""

    loss_gradient: float
    hidden_derivatives: Tuple[float, ...]


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :meth:`sigmanet.training.trainer.Trainer.run`."""

    steps: int
    epochs: int = 0
    skipped: int = 0
    is_trained: bool = False
    metrics_path: str = ""
    manifest_path: str = ""
    summary_path: str = ""
