"""ninjanet public API."""

from .core import activations, errors, matrix, results, serialization, types  # noqa: F401
from .core.activations import Activation
from .core.matrix import Matrix, column_vector
from .core.network import Network
from .core.results import Result, rank
from .core.serialization import dumps, load_model, loads, save_model
from .inference import Predictor, evaluate_file, predict_file
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer

__version__ = "0.1.0"

__all__ = [
    "Activation",
    "Matrix",
    "Network",
    "Predictor",
    "Result",
    "Trainer",
    "column_vector",
    "dumps",
    "evaluate_file",
    "load_model",
    "load_preset",
    "loads",
    "predict_file",
    "presets",
    "rank",
    "run_pipeline",
    "save_model",
]
