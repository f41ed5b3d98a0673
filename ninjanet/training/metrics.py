"""Metric helpers for the training loop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence

import numpy as np

from ..core.matrix import Matrix
from ..core.types import Array

DEFAULT_METRICS = ("loss", "mse", "accuracy")


@dataclass(frozen=True)
class MetricResult:
    name: str
    value: float


def stack_vectors(vectors: Sequence[Matrix]) -> Array:
    """Stack column vectors into an ``(examples, units)`` array."""

    if not vectors:
        return np.zeros((0, 0), dtype=np.float64)
    return np.stack([v.data for v in vectors])


def _cross_entropy(preds: Array, targs: Array) -> float:
    eps = 1e-12
    clipped = np.clip(preds, eps, 1.0 - eps)
    per_example = -np.sum(
        targs * np.log(clipped) + (1.0 - targs) * np.log(1.0 - clipped), axis=1
    )
    return float(np.mean(per_example))


def compute_metric(name: str, predictions: Array, targets: Array) -> MetricResult:
    key = name.lower()
    if predictions.shape != targets.shape:
        raise ValueError(
            f"predictions {predictions.shape} and targets {targets.shape} differ in shape"
        )
    if predictions.size == 0:
        return MetricResult(name=key, value=0.0)
    if key in {"loss", "cross_entropy"}:
        value = _cross_entropy(predictions, targets)
    elif key == "mse":
        value = float(np.mean((predictions - targets) ** 2))
    elif key == "accuracy":
        # argmax picks the first maximum, matching the top-ranked result
        value = float(np.mean(np.argmax(predictions, axis=1) == np.argmax(targets, axis=1)))
    else:
        raise KeyError(f"Unknown metric: {name}")
    return MetricResult(name=key, value=value)


def compute_metrics(
    names: Iterable[str],
    predictions: Sequence[Matrix] | Array,
    targets: Sequence[Matrix] | Array,
) -> Mapping[str, float]:
    preds = predictions if isinstance(predictions, np.ndarray) else stack_vectors(predictions)
    targs = targets if isinstance(targets, np.ndarray) else stack_vectors(targets)
    results: Dict[str, float] = {}
    for name in names:
        metric = compute_metric(name, preds, targs)
        results[metric.name] = metric.value
    return results


def parse_metric_names(names: str | Sequence[str] | None) -> List[str]:
    if names is None or names == "default":
        return list(DEFAULT_METRICS)
    if isinstance(names, str):
        return [m.strip() for m in names.split(",") if m.strip()]
    return [str(m) for m in names]


__all__ = [
    "DEFAULT_METRICS",
    "MetricResult",
    "compute_metric",
    "compute_metrics",
    "parse_metric_names",
    "stack_vectors",
]
