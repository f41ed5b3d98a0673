"""Ranked predictions over an output vector."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .matrix import Matrix
from .types import Array


@dataclass(frozen=True)
class Result:
    """Score of a single output unit."""

    index: int
    score: float

    def __str__(self) -> str:
        return f"Result(index={self.index}, score={self.score})"


def _rank_key(result: Result) -> float:
    # NaN scores sort after every real score
    return -math.inf if math.isnan(result.score) else result.score


def rank(values: Matrix | Sequence[float] | Array) -> List[Result]:
    """Return one :class:`Result` per entry, highest score first.

    The sort is stable, so equal scores keep their original index order.
    """

    if isinstance(values, Matrix):
        if not values.is_column_vector and values.rows != 1:
            raise ValueError(f"expected a vector, got {values.dimensions}")
        flat = values.data
    else:
        flat = np.asarray(values, dtype=np.float64).reshape(-1)
    results = [Result(idx, float(score)) for idx, score in enumerate(flat)]
    return sorted(results, key=_rank_key, reverse=True)


def top(values: Matrix | Sequence[float] | Array) -> Result:
    """Return the highest-ranked :class:`Result`."""

    ranked = rank(values)
    if not ranked:
        raise ValueError("cannot rank an empty vector")
    return ranked[0]


__all__ = ["Result", "rank", "top"]
