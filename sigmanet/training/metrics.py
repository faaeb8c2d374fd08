"""Metric helpers for the trainer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping

import numpy as np

from ..core.types import Array

THRESHOLD = 0.5


@dataclass(frozen=True)
class MetricResult:
    name: str
    value: float


def default_metrics(task_type: str = "binary") -> List[str]:
    if task_type == "regression":
        return ["mae", "rmse"]
    if task_type == "binary":
        return ["accuracy", "precision", "recall", "f1"]
    raise ValueError(f"Unknown task type: {task_type}")


def _confusion(preds: Array, targs: Array) -> tuple[float, float, float]:
    pred_idx = preds >= THRESHOLD
    targ_idx = targs >= THRESHOLD
    tp = float(np.sum(pred_idx & targ_idx))
    fp = float(np.sum(pred_idx & ~targ_idx))
    fn = float(np.sum(~pred_idx & targ_idx))
    return tp, fp, fn


def compute_metric(name: str, predictions: Array, targets: Array) -> MetricResult:
    """Compute ``name`` for sigmoid outputs ``predictions`` against ``targets``."""

    key = name.lower()
    preds = np.asarray(predictions, dtype=np.float64)
    targs = np.asarray(targets, dtype=np.float64)
    if key == "mae":
        value = float(np.mean(np.abs(preds - targs)))
    elif key == "rmse":
        value = float(np.sqrt(np.mean((preds - targs) ** 2)))
    elif key == "accuracy":
        value = float(np.mean((preds >= THRESHOLD) == (targs >= THRESHOLD)))
    elif key in {"precision", "recall", "f1"}:
        tp, fp, fn = _confusion(preds, targs)
        precision = tp / (tp + fp + 1e-9)
        recall = tp / (tp + fn + 1e-9)
        if key == "precision":
            value = float(precision)
        elif key == "recall":
            value = float(recall)
        else:
            value = float(2 * precision * recall / (precision + recall + 1e-9))
    else:
        raise KeyError(f"Unknown metric: {name}")
    return MetricResult(name=key, value=value)


def compute_metrics(
    names: Iterable[str],
    predictions: Array,
    targets: Array,
) -> Mapping[str, float]:
    results: Dict[str, float] = {}
    if len(predictions) == 0:
        return results
    for name in names:
        metric = compute_metric(name, predictions, targets)
        results[metric.name] = metric.value
    return results


def resolve_metric_names(metric_names: Iterable[str] | str) -> List[str]:
    """Expand ``"default"`` or a comma separated string into metric names."""

    if isinstance(metric_names, str):
        if metric_names.strip() in {"", "default"}:
            return default_metrics()
        return [m.strip() for m in metric_names.split(",") if m.strip()]
    names = list(metric_names)
    return names or default_metrics()


__all__ = [
    "MetricResult",
    "compute_metric",
    "compute_metrics",
    "default_metrics",
    "resolve_metric_names",
]
