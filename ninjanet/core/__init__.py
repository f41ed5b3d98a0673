"""Core numerical primitives for ninjanet."""

from . import activations, errors, matrix, network, results, serialization, types

__all__ = ["activations", "errors", "matrix", "network", "results", "serialization", "types"]
