"""Activation utilities for SigmaNet."""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(x: float | Array) -> float | Array:
    """Return the logistic function ``1 / (1 + e^-x)``."""

    return 1.0 / (1.0 + np.exp(-x))


def sigmoid_derivative(activation: float | Array) -> float | Array:
    """Return the sigmoid derivative expressed through its output.

    ``activation`` must already be ``sigmoid(x)``; the result is ``a * (1 - a)``.
    """

    return activation * (1.0 - activation)
