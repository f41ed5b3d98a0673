"""Sparse example files.

Each non-blank line holds one example::

    <label> <index>:<value> <index>:<value> ...

Feature indices are zero based and features that are not listed are 0. The
label is the index of the expected output unit; it becomes a one-hot target.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Tuple

import numpy as np

from ..core.errors import ExampleFormatError
from ..core.matrix import Matrix, column_vector
from ..core.types import Array, Batch

NumberedLine = Tuple[int, str]


def parse_label(token: str, num_outputs: int, lineno: int | None = None) -> int:
    try:
        label = int(token)
    except ValueError:
        raise ExampleFormatError(f"label must be an integer, got {token!r}", lineno) from None
    if not 0 <= label < num_outputs:
        raise ExampleFormatError(
            f"yval ({label}) out of range [0, {num_outputs}); wrong network architecture?",
            lineno,
        )
    return label


def parse_features(
    fields: Sequence[str], num_inputs: int, lineno: int | None = None
) -> Array:
    """Turn ``index:value`` tokens into a dense input array."""

    values = np.zeros(num_inputs, dtype=np.float64)
    for field in fields:
        index_str, sep, value_str = field.partition(":")
        if not sep:
            raise ExampleFormatError(f"expected index:value, got {field!r}", lineno)
        try:
            index = int(index_str)
            value = float(value_str)
        except ValueError:
            raise ExampleFormatError(f"invalid feature {field!r}", lineno) from None
        if not 0 <= index < num_inputs:
            raise ExampleFormatError(
                f"index ({index}) out of range [0, {num_inputs}); wrong network architecture?",
                lineno,
            )
        values[index] = value
    return values


def parse_input(line: str, num_inputs: int, lineno: int | None = None) -> Matrix:
    """Parse the features of ``line`` and ignore its label."""

    fields = line.split()
    if not fields:
        raise ExampleFormatError("empty example", lineno)
    return column_vector(parse_features(fields[1:], num_inputs, lineno))


def parse_example(
    line: str, num_inputs: int, num_outputs: int, lineno: int | None = None
) -> Tuple[Matrix, Matrix]:
    """Return the ``(input, one-hot target)`` column vectors for ``line``."""

    fields = line.split()
    if not fields:
        raise ExampleFormatError("empty example", lineno)
    label = parse_label(fields[0], num_outputs, lineno)
    target = np.zeros(num_outputs, dtype=np.float64)
    target[label] = 1.0
    inputs = parse_features(fields[1:], num_inputs, lineno)
    return column_vector(inputs), column_vector(target)


def parse_batch(
    lines: Iterable[NumberedLine | str], num_inputs: int, num_outputs: int
) -> Batch:
    """Parse example lines, given bare or as ``(lineno, line)`` pairs."""

    inputs: List[Matrix] = []
    targets: List[Matrix] = []
    for position, entry in enumerate(lines, start=1):
        lineno, line = entry if isinstance(entry, tuple) else (position, entry)
        x, y = parse_example(line, num_inputs, num_outputs, lineno)
        inputs.append(x)
        targets.append(y)
    return Batch(inputs=inputs, targets=targets)


def iter_example_lines(path: str | Path) -> Iterator[NumberedLine]:
    """Yield ``(lineno, line)`` for every non-blank line of ``path``."""

    with Path(path).open("r", encoding="utf-8") as handle:
        for lineno, line in enumerate(handle, start=1):
            stripped = line.strip()
            if stripped:
                yield lineno, stripped


def iter_line_batches(path: str | Path, batch_size: int) -> Iterator[List[NumberedLine]]:
    """Group example lines into lists of at most ``batch_size``."""

    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    batch: List[NumberedLine] = []
    for entry in iter_example_lines(path):
        batch.append(entry)
        if len(batch) == batch_size:
            yield batch
            batch = []
    if batch:
        yield batch


def count_examples(path: str | Path) -> int:
    return sum(1 for _ in iter_example_lines(path))


class ExampleFile:
    """Re-iterable source of parsed batches read from an example file.

    Every iteration re-opens the file, so one instance can feed several epochs.
    """

    def __init__(
        self, path: str | Path, batch_size: int, num_inputs: int, num_outputs: int
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.path = Path(path)
        self.batch_size = batch_size
        self.num_inputs = num_inputs
        self.num_outputs = num_outputs
        self._num_examples: int | None = None

    @property
    def num_examples(self) -> int:
        if self._num_examples is None:
            self._num_examples = count_examples(self.path)
        return self._num_examples

    def __iter__(self) -> Iterator[Batch]:
        for lines in iter_line_batches(self.path, self.batch_size):
            yield parse_batch(lines, self.num_inputs, self.num_outputs)

    def __len__(self) -> int:
        return math.ceil(self.num_examples / self.batch_size)


class ExampleLines:
    """In-memory counterpart of :class:`ExampleFile` over a list of lines."""

    def __init__(
        self, lines: Sequence[str], batch_size: int, num_inputs: int, num_outputs: int
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.lines = [
            (lineno, line.strip()) for lineno, line in enumerate(lines, start=1) if line.strip()
        ]
        self.batch_size = batch_size
        self.num_inputs = num_inputs
        self.num_outputs = num_outputs

    @property
    def num_examples(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[Batch]:
        for start in range(0, len(self.lines), self.batch_size):
            chunk = self.lines[start : start + self.batch_size]
            yield parse_batch(chunk, self.num_inputs, self.num_outputs)

    def __len__(self) -> int:
        return math.ceil(self.num_examples / self.batch_size)


def format_example(label: int, values: Sequence[float] | Array) -> str:
    """Render one example, listing non-zero features only."""

    flat = np.asarray(values, dtype=np.float64).reshape(-1)
    features = " ".join(f"{idx}:{repr(float(flat[idx]))}" for idx in np.flatnonzero(flat))
    return f"{int(label)} {features}".rstrip()


def write_examples(
    path: str | Path, labels: Sequence[int] | Array, inputs: Sequence[Sequence[float]] | Array
) -> Path:
    """Write ``inputs`` with their ``labels`` in the sparse example format."""

    if len(labels) != len(inputs):
        raise ValueError(f"got {len(labels)} labels for {len(inputs)} inputs")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        for label, values in zip(labels, inputs):
            handle.write(format_example(int(label), values) + "\n")
    return path


__all__ = [
    "ExampleFile",
    "ExampleLines",
    "count_examples",
    "format_example",
    "iter_example_lines",
    "iter_line_batches",
    "parse_batch",
    "parse_example",
    "parse_features",
    "parse_input",
    "parse_label",
    "write_examples",
]
