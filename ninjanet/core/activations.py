"""Element-wise activation functions."""

from __future__ import annotations

from enum import Enum

import numpy as np

from .matrix import Matrix
from .types import Array


def sigmoid(x: Array) -> Array:
    """Return ``1 / (1 + e^-x)``."""

    with np.errstate(over="ignore"):
        return 1.0 / (1.0 + np.exp(-x))


def sigmoid_prime(x: Array) -> Array:
    s = sigmoid(x)
    return s * (1.0 - s)


def identity(x: Array) -> Array:
    return np.array(x, dtype=np.float64, copy=True)


def identity_prime(x: Array) -> Array:
    return np.ones_like(x, dtype=np.float64)


class Activation(Enum):
    """Closed set of activations, each a (value, derivative) pair."""

    SIGMOID = "sigmoid"
    IDENTITY = "identity"

    def apply(self, matrix: Matrix) -> Matrix:
        return matrix.apply(_FUNCTIONS[self][0])

    def derivative(self, matrix: Matrix) -> Matrix:
        return matrix.apply(_FUNCTIONS[self][1])

    @classmethod
    def from_name(cls, name: "str | Activation") -> "Activation":
        if isinstance(name, Activation):
            return name
        try:
            return cls(str(name).lower())
        except ValueError as exc:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown activation {name!r}. Choose one of: {choices}") from exc


_FUNCTIONS = {
    Activation.SIGMOID: (sigmoid, sigmoid_prime),
    Activation.IDENTITY: (identity, identity_prime),
}

__all__ = ["Activation", "sigmoid", "sigmoid_prime", "identity", "identity_prime"]
