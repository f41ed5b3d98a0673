"""Dense row-major matrices and column vectors."""

from __future__ import annotations

from typing import Callable, Sequence

import numpy as np

from .errors import DimensionMismatchError, OutOfRangeError
from .types import Array


class Matrix:
    """Fixed-size matrix of ``float64`` values stored in one row-major buffer.

    Arithmetic methods return new matrices and leave their operands untouched.
    The ``*_into`` methods are the in-place counterparts used on the hot
    training path, where allocating a fresh buffer per example is wasteful.
    """

    __slots__ = ("_data",)

    def __init__(
        self, rows: int, cols: int, values: Sequence[float] | Array | None = None
    ) -> None:
        if rows < 0 or cols < 0:
            raise DimensionMismatchError(f"invalid matrix dimensions: {rows}x{cols}")
        if values is None:
            data = np.zeros(rows * cols, dtype=np.float64)
        else:
            data = np.array(values, dtype=np.float64)
            if data.ndim > 1 and data.shape != (rows, cols):
                raise DimensionMismatchError(
                    f"invalid matrix dimensions: {rows}x{cols} from a {data.shape} array"
                )
            data = data.reshape(-1)
            if data.size != rows * cols:
                raise DimensionMismatchError(
                    f"invalid matrix dimensions: {rows} rows, {cols} columns, "
                    f"{data.size} values"
                )
        self._data = data.reshape(rows, cols)

    # ------------------------------------------------------------------
    # Construction

    @classmethod
    def _wrap(cls, array: Array) -> "Matrix":
        matrix = cls.__new__(cls)
        matrix._data = np.ascontiguousarray(array, dtype=np.float64)
        return matrix

    @classmethod
    def zeros(cls, rows: int, cols: int) -> "Matrix":
        return cls(rows, cols)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "Matrix":
        """Build a matrix from a sequence of equally long rows."""

        if not rows:
            return cls(0, 0)
        width = len(rows[0])
        for idx, row in enumerate(rows):
            if len(row) != width:
                raise DimensionMismatchError(
                    f"row {idx} has {len(row)} values, expected {width}"
                )
        return cls(len(rows), width, [value for row in rows for value in row])

    @classmethod
    def from_array(cls, array: Array) -> "Matrix":
        """Copy a 2-D array; a 1-D array becomes a column vector."""

        array = np.asarray(array, dtype=np.float64)
        if array.ndim == 1:
            array = array.reshape(-1, 1)
        if array.ndim != 2:
            raise DimensionMismatchError(f"expected a 1-D or 2-D array, got {array.ndim}-D")
        return cls._wrap(array.copy())

    # ------------------------------------------------------------------
    # Shape and element access

    @property
    def rows(self) -> int:
        return int(self._data.shape[0])

    @property
    def cols(self) -> int:
        return int(self._data.shape[1])

    @property
    def shape(self) -> tuple[int, int]:
        return self.rows, self.cols

    @property
    def dimensions(self) -> str:
        return f"{self.rows}x{self.cols}"

    @property
    def is_column_vector(self) -> bool:
        return self.cols == 1

    @property
    def data(self) -> Array:
        """Return a copy of the flat row-major buffer."""

        return self._data.reshape(-1).copy()

    def to_array(self) -> Array:
        return self._data.copy()

    def tolist(self) -> list[list[float]]:
        return self._data.tolist()

    def _check_index(self, i: int, j: int) -> None:
        if not (0 <= i < self.rows and 0 <= j < self.cols):
            raise OutOfRangeError(f"cannot access {i}, {j} in {self.dimensions}")

    def get(self, i: int, j: int = 0) -> float:
        self._check_index(i, j)
        return float(self._data[i, j])

    def set(self, i: int, j: int, value: float) -> None:
        self._check_index(i, j)
        self._data[i, j] = value

    def copy(self) -> "Matrix":
        return Matrix._wrap(self._data.copy())

    # ------------------------------------------------------------------
    # Value-returning arithmetic

    def _require_same_shape(self, other: "Matrix", verb: str) -> None:
        if self.shape != other.shape:
            raise DimensionMismatchError(
                f"cannot {verb} {self.dimensions} and {other.dimensions}"
            )

    def add(self, other: "Matrix") -> "Matrix":
        self._require_same_shape(other, "add")
        return Matrix._wrap(self._data + other._data)

    def subtract(self, other: "Matrix") -> "Matrix":
        self._require_same_shape(other, "subtract")
        return Matrix._wrap(self._data - other._data)

    def element_multiply(self, other: "Matrix") -> "Matrix":
        self._require_same_shape(other, "element-multiply")
        return Matrix._wrap(self._data * other._data)

    def scale(self, alpha: float) -> "Matrix":
        return Matrix._wrap(self._data * alpha)

    def divide(self, alpha: float) -> "Matrix":
        if alpha == 0:
            raise ZeroDivisionError("cannot divide a matrix by zero")
        return Matrix._wrap(self._data / alpha)

    def transpose(self) -> "Matrix":
        return Matrix._wrap(self._data.T.copy())

    def multiply(self, other: "Matrix") -> "Matrix":
        """Matrix product ``self · other``."""

        if self.cols != other.rows:
            raise DimensionMismatchError(
                f"cannot multiply {self.dimensions} by {other.dimensions}"
            )
        return Matrix._wrap(self._data @ other._data)

    def apply(self, fn: Callable[[Array], Array]) -> "Matrix":
        """Apply a vectorised element-wise function."""

        return Matrix._wrap(fn(self._data))

    __add__ = add
    __sub__ = subtract
    __matmul__ = multiply

    # ------------------------------------------------------------------
    # In-place arithmetic

    def add_into(self, other: "Matrix") -> None:
        self._require_same_shape(other, "add")
        np.add(self._data, other._data, out=self._data)

    def subtract_into(self, other: "Matrix") -> None:
        self._require_same_shape(other, "subtract")
        np.subtract(self._data, other._data, out=self._data)

    def scale_into(self, alpha: float) -> None:
        np.multiply(self._data, alpha, out=self._data)

    def divide_into(self, alpha: float) -> None:
        if alpha == 0:
            raise ZeroDivisionError("cannot divide a matrix by zero")
        np.divide(self._data, alpha, out=self._data)

    # ------------------------------------------------------------------
    # Slicing and vectors

    def extract_vector(
        self, is_row: bool, index: int, start: int = 0, length: int | None = None
    ) -> "Matrix":
        """Copy a contiguous segment of row or column ``index``.

        A row segment comes back as a ``1 x length`` matrix and a column
        segment as a ``length x 1`` column vector. ``length`` defaults to the
        rest of the row or column.
        """

        limit = self.rows if not is_row else self.cols
        outer = self.rows if is_row else self.cols
        if not 0 <= index < outer:
            kind = "row" if is_row else "column"
            raise OutOfRangeError(f"{kind} {index} outside {self.dimensions}")
        if length is None:
            length = limit - start
        if start < 0 or length < 0 or start + length > limit:
            raise OutOfRangeError(
                f"segment [{start}, {start + length}) outside {self.dimensions}"
            )
        if is_row:
            return Matrix._wrap(self._data[index, start : start + length].reshape(1, -1).copy())
        return Matrix._wrap(self._data[start : start + length, index].reshape(-1, 1).copy())

    def _require_column(self, action: str) -> None:
        if not self.is_column_vector:
            raise DimensionMismatchError(
                f"{action} only supports column vectors, got {self.dimensions}"
            )

    def prepend_bias_unit(self) -> "Matrix":
        """Return ``[1.0, v0, v1, ...]`` as a new column vector."""

        self._require_column("prepend_bias_unit")
        return Matrix._wrap(np.concatenate(([[1.0]], self._data)))

    def strip_bias_unit(self) -> "Matrix":
        """Drop the first entry of a column vector."""

        self._require_column("strip_bias_unit")
        if self.rows == 0:
            raise DimensionMismatchError("cannot strip the bias unit of an empty vector")
        return Matrix._wrap(self._data[1:].copy())

    # ------------------------------------------------------------------
    # Comparison

    def approximately_equal(self, other: "Matrix", tolerance: float = 1e-5) -> bool:
        """Return ``True`` when shapes match and every entry is within ``tolerance``.

        Two NaNs compare equal, as do two infinities of the same sign.
        """

        if self.shape != other.shape:
            return False
        a, b = self._data, other._data
        with np.errstate(invalid="ignore"):
            close = np.abs(a - b) <= tolerance
        same = (a == b) | (np.isnan(a) & np.isnan(b))
        return bool(np.all(close | same))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Matrix({self.dimensions}, {self.tolist()!r})"

    def __str__(self) -> str:
        return "\n".join("  ".join(repr(v) for v in row) for row in self.tolist())


def column_vector(values: Sequence[float] | Array) -> Matrix:
    """Build an ``n x 1`` column vector from ``values``."""

    data = np.array(values, dtype=np.float64)
    if data.ndim > 1 and sum(dim != 1 for dim in data.shape) > 1:
        raise DimensionMismatchError(f"expected a vector, got a {data.shape} array")
    data = data.reshape(-1)
    return Matrix(data.size, 1, data)


def as_column_vector(values: "Matrix | Sequence[float] | Array") -> Matrix:
    """Coerce ``values`` into a column vector, rejecting wider matrices."""

    if isinstance(values, Matrix):
        values._require_column("as_column_vector")
        return values
    return column_vector(values)


__all__ = ["Matrix", "column_vector", "as_column_vector"]
