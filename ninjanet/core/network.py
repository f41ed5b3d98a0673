"""Fully connected feed-forward network trained with backpropagation."""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

import numpy as np

from .activations import Activation
from .errors import DimensionMismatchError
from .matrix import Matrix, as_column_vector
from .results import Result, rank
from .types import Array, ForwardVectors, ModelDescription

DEFAULT_SEED = 8723643324

VectorLike = Union[Matrix, Sequence[float], Array]


class Network:
    """A stack of weight matrices, one per layer transition.

    Weight matrix ``l`` has shape ``units[l + 1] x (units[l] + 1)``; column 0
    holds the weight of the constant bias input. A network built from ``L``
    layers (input and output included) therefore owns ``L - 1`` matrices.
    """

    def __init__(
        self,
        weights: Sequence[Matrix],
        *,
        activation: Activation | str = Activation.SIGMOID,
    ) -> None:
        if not weights:
            raise ValueError("a network needs at least one weight matrix")
        self._weights: List[Matrix] = [w.copy() for w in weights]
        self.activation = Activation.from_name(activation)
        self._layer_sizes = self._compute_layer_sizes()

    @classmethod
    def from_layer_sizes(
        cls,
        layer_sizes: Sequence[int],
        *,
        seed: int = DEFAULT_SEED,
        rng: np.random.Generator | None = None,
        activation: Activation | str = Activation.SIGMOID,
    ) -> "Network":
        """Build a randomly initialised network for ``layer_sizes``.

        ``layer_sizes`` counts the non-bias units of every layer, input and
        output included. Weights come from ``rng`` when given, otherwise from
        a generator seeded with ``seed``.
        """

        sizes = [int(size) for size in layer_sizes]
        if len(sizes) < 2:
            raise ValueError(f"need at least an input and an output layer, got {sizes}")
        if any(size <= 0 for size in sizes):
            raise ValueError(f"layer sizes must be positive, got {sizes}")
        weights = [Matrix(sizes[i + 1], sizes[i] + 1) for i in range(len(sizes) - 1)]
        network = cls(weights, activation=activation)
        network.random_initialize(rng if rng is not None else np.random.default_rng(seed))
        return network

    def _compute_layer_sizes(self) -> List[int]:
        first = self._weights[0]
        if first.cols < 1:
            raise DimensionMismatchError(
                f"weight matrix 0 is {first.dimensions}; it needs a bias column"
            )
        sizes = [first.cols - 1]
        for idx, w in enumerate(self._weights):
            expected = sizes[-1] + 1
            if w.cols != expected:
                raise DimensionMismatchError(
                    f"weight matrix {idx} is {w.dimensions}; expected {expected} columns"
                )
            if w.rows < 1:
                raise DimensionMismatchError(f"weight matrix {idx} has no rows")
            sizes.append(w.rows)
        return sizes

    # ------------------------------------------------------------------
    # Architecture

    @property
    def num_layers(self) -> int:
        return len(self._weights) + 1

    @property
    def layer_sizes(self) -> List[int]:
        return list(self._layer_sizes)

    @property
    def weights(self) -> List[Matrix]:
        return [w.copy() for w in self._weights]

    def num_units(self, layer: int) -> int:
        """Number of non-bias units in ``layer`` (the input layer is 0)."""

        return self._layer_sizes[layer]

    def weight_matrix(self, layer: int) -> Matrix:
        return self._weights[layer].copy()

    def describe(self) -> ModelDescription:
        return ModelDescription(layer_sizes=self.layer_sizes)

    def random_initialize(self, rng: np.random.Generator) -> None:
        """Draw every weight uniformly from ``[-eps, eps]``.

        ``eps = sqrt(6) / sqrt(fan_in + fan_out)`` per layer; entries are drawn
        in row-major order, layer by layer, from the single ``rng``.
        """

        for layer, w in enumerate(self._weights):
            fan_in = self._layer_sizes[layer]
            fan_out = self._layer_sizes[layer + 1]
            epsilon = np.sqrt(6.0) / np.sqrt(fan_in + fan_out)
            values = rng.random(w.shape) * 2 * epsilon - epsilon
            self._weights[layer] = Matrix.from_array(values)

    # ------------------------------------------------------------------
    # Forward and backward passes

    def feed_forward(self, values: VectorLike) -> ForwardVectors:
        x = as_column_vector(values)
        if x.rows != self._layer_sizes[0]:
            raise DimensionMismatchError(
                f"input has {x.rows} values, network expects {self._layer_sizes[0]}"
            )
        layers = self.num_layers
        z: List[Optional[Matrix]] = [None] * layers
        a: List[Matrix] = [x.prepend_bias_unit()]
        for l in range(1, layers):
            z[l] = self._weights[l - 1].multiply(a[l - 1])
            activation = self.activation.apply(z[l])
            if l != layers - 1:
                activation = activation.prepend_bias_unit()
            a.append(activation)
        return ForwardVectors(z=z, a=a)

    def apply(self, values: VectorLike) -> Matrix:
        """Return the output-layer activation for one input."""

        return self.feed_forward(values).output

    def predict(self, values: VectorLike) -> List[Result]:
        """Return output units ranked by descending score."""

        return rank(self.apply(values))

    def _check_forward_vectors(self, fv: ForwardVectors) -> None:
        layers = self.num_layers
        if len(fv.a) != layers or len(fv.z) != layers:
            raise DimensionMismatchError(
                f"forward vectors cover {len(fv.a)} layers, network has {layers}"
            )
        for l, size in enumerate(self._layer_sizes):
            expected = size if l == layers - 1 else size + 1
            if fv.a[l].rows != expected:
                raise DimensionMismatchError(
                    f"activation {l} has {fv.a[l].rows} rows, expected {expected}"
                )
            if l and (fv.z[l] is None or fv.z[l].rows != size):
                raise DimensionMismatchError(f"pre-activation {l} does not match layer size {size}")

    def backprop(self, fv: ForwardVectors, target: VectorLike) -> List[Optional[Matrix]]:
        """Return per-layer error vectors; entry 0 is always ``None``."""

        self._check_forward_vectors(fv)
        y = as_column_vector(target)
        if y.rows != self._layer_sizes[-1]:
            raise DimensionMismatchError(
                f"target has {y.rows} values, network outputs {self._layer_sizes[-1]}"
            )
        layers = self.num_layers
        deltas: List[Optional[Matrix]] = [None] * layers
        deltas[-1] = fv.a[-1].subtract(y)
        for l in range(layers - 2, 0, -1):
            back = self._weights[l].transpose().multiply(deltas[l + 1])
            gate = self.activation.derivative(fv.z[l].prepend_bias_unit())
            deltas[l] = back.element_multiply(gate).strip_bias_unit()
        return deltas

    # ------------------------------------------------------------------
    # Training

    def _accumulate(
        self, xs: Sequence[VectorLike], ys: Sequence[VectorLike]
    ) -> tuple[List[Matrix], List[Matrix]]:
        if len(xs) != len(ys):
            raise DimensionMismatchError(
                f"x and y must be the same length, got {len(xs)} and {len(ys)}"
            )
        if not xs:
            raise ValueError("cannot compute a gradient over an empty batch")
        big_deltas = [Matrix.zeros(*w.shape) for w in self._weights]
        outputs: List[Matrix] = []
        for x, y in zip(xs, ys):
            fv = self.feed_forward(x)
            deltas = self.backprop(fv, y)
            for l, acc in enumerate(big_deltas):
                acc.add_into(deltas[l + 1].multiply(fv.a[l].transpose()))
            outputs.append(fv.output)
        for acc in big_deltas:
            acc.divide_into(len(xs))
        return big_deltas, outputs

    def compute_gradient(
        self, xs: Sequence[VectorLike], ys: Sequence[VectorLike]
    ) -> List[Matrix]:
        """Mean gradient of every weight matrix over the batch."""

        gradients, _ = self._accumulate(xs, ys)
        return gradients

    def apply_gradients(self, gradients: Sequence[Matrix], learning_rate: float) -> None:
        """Update ``w[l] -= learning_rate * gradients[l]`` for every layer."""

        if len(gradients) != len(self._weights):
            raise DimensionMismatchError(
                f"got {len(gradients)} gradients for {len(self._weights)} weight matrices"
            )
        for idx, (w, grad) in enumerate(zip(self._weights, gradients)):
            if w.shape != grad.shape:
                raise DimensionMismatchError(
                    f"gradient {idx} is {grad.dimensions}, weights are {w.dimensions}"
                )
        for w, grad in zip(self._weights, gradients):
            w.subtract_into(grad.scale(learning_rate))

    def train_batch(
        self,
        xs: Sequence[VectorLike],
        ys: Sequence[VectorLike],
        learning_rate: float,
    ) -> List[Matrix]:
        """Run one gradient descent step over a batch.

        Returns the output vectors computed before the update, one per example.
        """

        gradients, outputs = self._accumulate(xs, ys)
        self.apply_gradients(gradients, learning_rate)
        return outputs

    def train_example(self, x: VectorLike, y: VectorLike, learning_rate: float) -> Matrix:
        """Stochastic variant: one update from a single example."""

        return self.train_batch([x], [y], learning_rate)[0]

    def parameter_count(self) -> int:
        return int(sum(w.rows * w.cols for w in self._weights))

    def __repr__(self) -> str:
        return f"Network(layer_sizes={self._layer_sizes}, activation={self.activation.value})"

    def __str__(self) -> str:
        return "\n\n".join(str(w) for w in self._weights)


__all__ = ["DEFAULT_SEED", "Network"]
