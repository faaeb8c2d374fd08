"""Training loop, metrics and config pipelines."""

from .pipelines import build_network, load_preset, presets, run_pipeline
from .trainer import CycleResult, Trainer

__all__ = ["CycleResult", "Trainer", "build_network", "load_preset", "presets", "run_pipeline"]
