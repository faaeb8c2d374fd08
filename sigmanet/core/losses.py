"""Squared-error loss used by the network."""

from __future__ import annotations

import numpy as np

from .types import Array


def squared_error(predicted: float | Array, target: float | Array) -> float | Array:
    """Halved squared error, ``0.5 * (predicted - target) ** 2``."""

    return 0.5 * np.square(np.subtract(predicted, target))


def squared_error_gradient(
    predicted: float | Array, target: float | Array
) -> float | Array:
    """Derivative of :func:`squared_error` with respect to ``predicted``."""

    return np.subtract(predicted, target)


__all__ = ["squared_error", "squared_error_gradient"]
