"""Convert MNIST ``.npz`` archives into sparse example files."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Tuple

import numpy as np

from ..core.types import Array
from .examples import write_examples

_SPLITS = ("train", "test")


def _lookup(data: Mapping[str, Array], *names: str) -> Array:
    lowered = {key.lower(): key for key in data.keys()}
    for name in names:
        if name.lower() in lowered:
            return data[lowered[name.lower()]]
    raise KeyError(f"archive has none of {names}; found {sorted(data.keys())}")


def _prepare(images: Array, labels: Array, max_items: int | None) -> Tuple[Array, Array]:
    X = images.reshape(images.shape[0], -1).astype(np.float64)
    if X.size and X.max() > 1:
        X /= 255.0
    y = labels.reshape(-1).astype(int)
    if max_items is not None:
        X, y = X[:max_items], y[:max_items]
    return X, y


def convert_npz(
    npz_path: str | Path,
    out_dir: str | Path,
    *,
    max_items: int | None = None,
    prefix: str = "mnist",
) -> Dict[str, Path]:
    """Write ``<prefix>.train`` and ``<prefix>.test`` example files.

    The archive must hold ``x_train``/``y_train``/``x_test``/``y_test`` arrays
    (key case is ignored). Pixel values above 1 are scaled into ``[0, 1]``.
    """

    out_dir = Path(out_dir)
    written: Dict[str, Path] = {}
    with np.load(npz_path) as data:
        arrays = {key: data[key] for key in data.files}
    for split in _SPLITS:
        images = _lookup(arrays, f"x_{split}")
        labels = _lookup(arrays, f"y_{split}")
        X, y = _prepare(images, labels, max_items)
        written[split] = write_examples(out_dir / f"{prefix}.{split}", y, X)
    return written


__all__ = ["convert_npz"]
