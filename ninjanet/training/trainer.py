"""Epoch-based gradient descent training loop."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Mapping, Sequence

from ..core.matrix import Matrix
from ..core.network import Network
from ..core.serialization import save_model
from ..core.types import Batch
from .metrics import compute_metrics, parse_metric_names

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainResult:
    """Summary returned by :meth:`Trainer.run`."""

    epochs: int
    steps: int
    examples: int
    metrics: Mapping[str, float] = field(default_factory=dict)
    model_path: str = ""


class Trainer:
    """Run gradient descent over a re-iterable source of batches.

    The batch size of the source decides the flavour: the whole data set in
    one batch is batch gradient descent, single-example batches are the
    stochastic variant. Either way the network owns the weights and this loop
    is the only thing that asks it to update them.
    """

    def __init__(
        self,
        network: Network,
        learning_rate: float,
        callbacks: Sequence[object] | None = None,
        metric_names: str | Sequence[str] | None = None,
    ) -> None:
        if learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {learning_rate}")
        self.network = network
        self.learning_rate = float(learning_rate)
        self.callbacks = list(callbacks or [])
        self.metric_names = parse_metric_names(metric_names)

    def run(
        self,
        batches: Iterable[Batch],
        epochs: int,
        *,
        model_path: str | Path | None = None,
    ) -> TrainResult:
        if epochs < 1:
            raise ValueError(f"epochs must be at least 1, got {epochs}")

        total_steps = 0
        total_examples = 0
        metrics: Mapping[str, float] = {}
        for epoch in range(1, epochs + 1):
            outputs: List[Matrix] = []
            targets: List[Matrix] = []
            steps = 0
            for batch in batches:
                outputs.extend(
                    self.network.train_batch(batch.inputs, batch.targets, self.learning_rate)
                )
                targets.extend(batch.targets)
                steps += 1
                logger.debug("epoch %d step %d: %d examples", epoch, steps, len(batch))
            if steps == 0:
                raise ValueError("batch source produced no batches")
            total_steps += steps
            total_examples += len(targets)

            metrics = compute_metrics(self.metric_names, outputs, targets)
            self._emit_epoch(epoch, metrics)
            logger.info(
                "epoch %d/%d %s",
                epoch,
                epochs,
                " ".join(f"{name}={value:.6f}" for name, value in metrics.items()),
            )

        saved = ""
        if model_path is not None:
            saved = str(save_model(self.network, model_path))
            logger.info("wrote model to %s", saved)
        return TrainResult(
            epochs=epochs,
            steps=total_steps,
            examples=total_examples,
            metrics=dict(metrics),
            model_path=saved,
        )

    def evaluate(self, batches: Iterable[Batch]) -> Mapping[str, float]:
        """Compute metrics without touching the weights."""

        outputs: List[Matrix] = []
        targets: List[Matrix] = []
        for batch in batches:
            outputs.extend(self.network.apply(x) for x in batch.inputs)
            targets.extend(batch.targets)
        return compute_metrics(self.metric_names, outputs, targets)

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["TrainResult", "Trainer"]
