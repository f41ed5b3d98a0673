"""Example file readers and writers."""

from .examples import (
    ExampleFile,
    ExampleLines,
    count_examples,
    format_example,
    iter_line_batches,
    parse_batch,
    parse_example,
    parse_input,
    write_examples,
)

__all__ = [
    "ExampleFile",
    "ExampleLines",
    "count_examples",
    "format_example",
    "iter_line_batches",
    "parse_batch",
    "parse_example",
    "parse_input",
    "write_examples",
]
