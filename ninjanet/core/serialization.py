"""Plain-text model format.

A model file looks like::

    num_layers=3
    layer_sizes=784 30 10
    w

    <row 0 of w[0]>
    ...

    <row 0 of w[1]>
    ...

Header ``key=value`` lines run until the literal line ``w``. Each weight
matrix then follows row by row; matrix ``l`` has ``layer_sizes[l + 1]`` rows of
``layer_sizes[l] + 1`` whitespace-separated numbers. Blank lines are ignored.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, TextIO, Tuple

from .activations import Activation
from .errors import ModelFormatError
from .matrix import Matrix
from .network import Network

_WEIGHTS_MARKER = "w"


def _format_value(value: float) -> str:
    return repr(float(value))


def write_model(network: Network, handle: TextIO) -> None:
    """Write ``network`` to an open text stream."""

    sizes = network.layer_sizes
    handle.write(f"num_layers={network.num_layers}\n")
    handle.write("layer_sizes=" + " ".join(str(size) for size in sizes) + "\n")
    handle.write(_WEIGHTS_MARKER + "\n\n")
    for w in network.weights:
        for row in w.tolist():
            handle.write(" ".join(_format_value(value) for value in row) + "\n")
        handle.write("\n")


def dumps(network: Network) -> str:
    buffer = io.StringIO()
    write_model(network, buffer)
    return buffer.getvalue()


def save_model(network: Network, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        write_model(network, handle)
    return path


def _content_lines(lines: Iterable[str]) -> Iterator[Tuple[int, str]]:
    for lineno, line in enumerate(lines, start=1):
        stripped = line.strip()
        if stripped:
            yield lineno, stripped


def _parse_int(value: str, key: str, lineno: int) -> int:
    try:
        return int(value)
    except ValueError:
        raise ModelFormatError(f"{key} must be an integer, got {value!r}", lineno) from None


def _read_header(lines: Iterator[Tuple[int, str]]) -> List[int]:
    header: Dict[str, Tuple[int, str]] = {}
    for lineno, line in lines:
        if line == _WEIGHTS_MARKER:
            break
        key, sep, value = line.partition("=")
        if not sep:
            raise ModelFormatError(f"expected key=value header, got {line!r}", lineno)
        header[key.strip()] = (lineno, value.strip())
    else:
        raise ModelFormatError("missing weights marker 'w'")

    for key in ("num_layers", "layer_sizes"):
        if key not in header:
            raise ModelFormatError(f"missing header field {key!r}")
    lineno, value = header["num_layers"]
    num_layers = _parse_int(value, "num_layers", lineno)
    lineno, value = header["layer_sizes"]
    sizes = [_parse_int(field, "layer_sizes", lineno) for field in value.split()]
    if len(sizes) != num_layers:
        raise ModelFormatError(
            f"num_layers={num_layers} but layer_sizes lists {len(sizes)} layers", lineno
        )
    if num_layers < 2:
        raise ModelFormatError(f"a model needs at least 2 layers, got {num_layers}", lineno)
    if any(size <= 0 for size in sizes):
        raise ModelFormatError(f"layer sizes must be positive, got {sizes}", lineno)
    return sizes


def _read_matrix(lines: Iterator[Tuple[int, str]], rows: int, cols: int, layer: int) -> Matrix:
    values: List[float] = []
    for _ in range(rows):
        entry = next(lines, None)
        if entry is None:
            raise ModelFormatError(
                f"unexpected end of model while reading weight matrix {layer}"
            )
        lineno, line = entry
        fields = line.split()
        if len(fields) != cols:
            raise ModelFormatError(
                f"wrong number of columns in weight matrix {layer}: "
                f"expected {cols}, got {len(fields)}",
                lineno,
            )
        try:
            values.extend(float(field) for field in fields)
        except ValueError:
            raise ModelFormatError(f"invalid number in {line!r}", lineno) from None
    return Matrix(rows, cols, values)


def read_model(
    source: TextIO | Iterable[str], *, activation: Activation | str = Activation.SIGMOID
) -> Network:
    """Parse a model from a text stream or any iterable of lines."""

    lines = _content_lines(source)
    sizes = _read_header(lines)
    weights = [
        _read_matrix(lines, sizes[l], sizes[l - 1] + 1, l - 1) for l in range(1, len(sizes))
    ]
    extra = next(lines, None)
    if extra is not None:
        raise ModelFormatError("unexpected data after the last weight matrix", extra[0])
    return Network(weights, activation=activation)


def loads(text: str, *, activation: Activation | str = Activation.SIGMOID) -> Network:
    return read_model(io.StringIO(text), activation=activation)


def load_model(path: str | Path, *, activation: Activation | str = Activation.SIGMOID) -> Network:
    with Path(path).open("r", encoding="utf-8") as handle:
        return read_model(handle, activation=activation)


__all__ = ["write_model", "dumps", "save_model", "read_model", "loads", "load_model"]
