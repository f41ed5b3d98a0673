"""Core typing contracts for ninjanet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

import numpy as np

if TYPE_CHECKING:  # pragma: no cover
    from .matrix import Matrix

Array = np.ndarray


@dataclass(frozen=True)
class Batch:
    """Paired input and target column vectors for one update step."""

    inputs: List["Matrix"]
    targets: List["Matrix"]

    def __len__(self) -> int:
        return len(self.inputs)


@dataclass
class ForwardVectors:
    """Per-layer vectors captured during a forward pass.

    ``z[l]`` is the pre-activation of layer ``l`` (``z[0]`` is ``None``) and
    ``a[l]`` its activation. Every ``a[l]`` except the output carries a
    leading bias unit.
    """

    z: List[Optional["Matrix"]]
    a: List["Matrix"]

    @property
    def output(self) -> "Matrix":
        return self.a[-1]


@dataclass(frozen=True)
class ModelDescription:
    """Description of the feed-forward network architecture."""

    layer_sizes: List[int]

    @property
    def num_layers(self) -> int:
        return len(self.layer_sizes)

    @property
    def parameter_count(self) -> int:
        dims = self.layer_sizes
        return sum((dims[i] + 1) * dims[i + 1] for i in range(len(dims) - 1))


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`ninjanet.training.pipelines.run_pipeline`."""

    epochs: int
    steps: int
    model_path: str
    metrics_path: str
    manifest_path: str
    test_metrics: Dict[str, float] = field(default_factory=dict)
