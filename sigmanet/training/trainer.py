"""Online training loop driving a :class:`~sigmanet.core.network.Network`."""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence

import numpy as np

from ..core.errors import FormatError, SizeMismatchError
from ..core.network import Network
from ..core.types import RunResult
from .metrics import compute_metrics, resolve_metric_names


@dataclass(frozen=True)
class CycleResult:
    """Values read off the network after one training cycle."""

    predicted_value: float
    target_value: float
    loss: float
    loss_gradient: float


class Trainer:
    """Feed records through the network one at a time, epoch after epoch."""

    def __init__(
        self,
        network: Network,
        callbacks: Sequence[object] | None = None,
        *,
        skip_malformed: bool = True,
    ) -> None:
        self.network = network
        self.callbacks = list(callbacks or [])
        self.skip_malformed = skip_malformed
        self.steps = 0
        self.skipped = 0

    def cycle(self, fields: Sequence[str]) -> CycleResult:
        """Run initialize, feedforward, loss and backpropagate for one record."""

        net = self.network
        net.initialize(fields)
        net.feedforward()
        loss = net.compute_loss()
        gradient = net.compute_loss_gradient()
        net.backpropagate()
        self.steps += 1
        result = CycleResult(
            predicted_value=net.predicted_value,
            target_value=net.target_value,
            loss=loss,
            loss_gradient=gradient,
        )
        self._emit_step(result)
        return result

    def evaluate(
        self,
        records: Iterable[Sequence[str]],
        metric_names: Iterable[str] | str = "default",
    ) -> Mapping[str, float]:
        """Mean loss and metrics over ``records`` without updating the network."""

        net = self.network
        losses: List[float] = []
        predictions: List[float] = []
        targets: List[float] = []
        for fields in records:
            if not self._load(fields):
                continue
            net.feedforward()
            losses.append(net.compute_loss())
            predictions.append(net.predicted_value)
            targets.append(net.target_value)
        return self._summarise(losses, predictions, targets, metric_names)

    def run(
        self,
        records: Sequence[Sequence[str]],
        epochs: int,
        seed: int,
        *,
        shuffle: bool = True,
        test_records: Sequence[Sequence[str]] | None = None,
        metric_names: Iterable[str] | str = "default",
        split_loggers: Mapping[str, Sequence[object]] | None = None,
        tolerance: float | None = None,
        early_stopping_patience: int | None = None,
    ) -> RunResult:
        if epochs < 1:
            raise ValueError("epochs must be >= 1")
        names = resolve_metric_names(metric_names)
        split_loggers = split_loggers or {}
        rng = np.random.default_rng(seed)
        best_loss = float("inf")
        epochs_no_improve = 0
        epochs_run = 0

        for epoch in range(1, epochs + 1):
            order = rng.permutation(len(records)) if shuffle else range(len(records))
            losses: List[float] = []
            predictions: List[float] = []
            targets: List[float] = []
            skipped_before = self.skipped
            for index in order:
                result = self._train_record(records[int(index)])
                if result is None:
                    continue
                losses.append(result.loss)
                predictions.append(result.predicted_value)
                targets.append(result.target_value)
            epochs_run = epoch

            train_metrics = dict(self._summarise(losses, predictions, targets, names))
            train_metrics["skipped"] = float(self.skipped - skipped_before)
            self._emit_epoch("train", epoch, train_metrics, split_loggers)

            if test_records:
                test_metrics = self.evaluate(test_records, names)
                self._emit_epoch("test", epoch, test_metrics, split_loggers)

            if not losses:
                continue
            current_loss = train_metrics["loss"]
            if tolerance is not None and current_loss < tolerance:
                self.network.is_trained = True
                break
            if current_loss < best_loss - 1e-12:
                best_loss = current_loss
                epochs_no_improve = 0
            else:
                epochs_no_improve += 1
                if early_stopping_patience and epochs_no_improve >= early_stopping_patience:
                    break

        return RunResult(
            steps=self.steps,
            epochs=epochs_run,
            skipped=self.skipped,
            is_trained=self.network.is_trained,
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _train_record(self, fields: Sequence[str]) -> CycleResult | None:
        try:
            return self.cycle(fields)
        except (FormatError, SizeMismatchError) as exc:
            if not self.skip_malformed:
                raise
            self._skip(exc)
            return None

    def _load(self, fields: Sequence[str]) -> bool:
        try:
            self.network.initialize(fields)
        except (FormatError, SizeMismatchError) as exc:
            if not self.skip_malformed:
                raise
            self._skip(exc)
            return False
        return True

    def _skip(self, exc: Exception) -> None:
        self.skipped += 1
        warnings.warn(f"Skipping malformed record: {exc}", RuntimeWarning, stacklevel=3)

    @staticmethod
    def _summarise(
        losses: Sequence[float],
        predictions: Sequence[float],
        targets: Sequence[float],
        metric_names: Iterable[str] | str,
    ) -> Mapping[str, float]:
        metrics = {"loss": float(np.mean(losses)) if losses else 0.0}
        metrics.update(
            compute_metrics(
                resolve_metric_names(metric_names),
                np.asarray(predictions, dtype=np.float64),
                np.asarray(targets, dtype=np.float64),
            )
        )
        return metrics

    def _emit_step(self, result: CycleResult) -> None:
        metrics = {"loss": result.loss, "predicted": result.predicted_value}
        for callback in self.callbacks:
            if hasattr(callback, "on_step"):
                callback.on_step(self.steps, metrics)  # type: ignore[attr-defined]

    def _emit_epoch(
        self,
        split: str,
        epoch: int,
        metrics: Mapping[str, float],
        loggers: Mapping[str, Sequence[object]],
    ) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
        for callback in loggers.get(split, []):
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["CycleResult", "Trainer"]
