"""Training loop, metrics and config-driven pipelines."""

from .pipelines import load_preset, presets, run_pipeline
from .trainer import Trainer, TrainResult

__all__ = ["Trainer", "TrainResult", "load_preset", "presets", "run_pipeline"]
