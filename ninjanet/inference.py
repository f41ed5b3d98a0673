"""Prediction and evaluation over sparse example files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Sequence, TextIO

from .core.matrix import Matrix
from .core.network import Network
from .core.results import Result, rank
from .core.types import Array
from .data.examples import iter_example_lines, parse_input, parse_label

logger = logging.getLogger(__name__)


class Predictor:
    """Rank the output units of a trained network."""

    def __init__(self, network: Network) -> None:
        self.network = network

    @property
    def num_inputs(self) -> int:
        return self.network.num_units(0)

    @property
    def num_outputs(self) -> int:
        return self.network.num_units(self.network.num_layers - 1)

    def predict(self, values: Matrix | Sequence[float] | Array) -> List[Result]:
        return rank(self.network.apply(values))

    def predict_line(self, line: str, lineno: int | None = None) -> List[Result]:
        return self.predict(parse_input(line, self.num_inputs, lineno))


def write_prediction(handle: TextIO, results: Sequence[Result], verbose: bool = False) -> None:
    """Write the top result, then every ranked result when ``verbose``."""

    best = results[0]
    handle.write(f"{best.index}\t{best.score:f}\n")
    if verbose:
        for result in results:
            handle.write(f"\t{result.score:f}\t{result.index}\n")


def predict_file(
    network: Network,
    examples: str | Path,
    response: str | Path,
    *,
    verbose: bool = False,
) -> int:
    """Write one prediction per example line; returns the number of examples."""

    predictor = Predictor(network)
    response = Path(response)
    response.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with response.open("w", encoding="utf-8") as handle:
        for lineno, line in iter_example_lines(examples):
            write_prediction(handle, predictor.predict_line(line, lineno), verbose=verbose)
            count += 1
    logger.info("wrote %d predictions to %s", count, response)
    return count


def evaluate_file(network: Network, examples: str | Path) -> Dict[str, float]:
    """Top-1 accuracy of ``network`` against the labels in ``examples``."""

    predictor = Predictor(network)
    total = 0
    correct = 0
    for lineno, line in iter_example_lines(examples):
        label = parse_label(line.split()[0], predictor.num_outputs, lineno)
        if predictor.predict_line(line, lineno)[0].index == label:
            correct += 1
        total += 1
    accuracy = correct / total if total else 0.0
    logger.info("%d/%d correct (accuracy %.4f)", correct, total, accuracy)
    return {"examples": total, "correct": correct, "accuracy": accuracy}


__all__ = ["Predictor", "evaluate_file", "predict_file", "write_prediction"]
