"""Reporting utilities for ninjanet."""

from .artifacts import write_manifest
from .metrics import CsvSink, JsonlSink

__all__ = ["write_manifest", "JsonlSink", "CsvSink"]
