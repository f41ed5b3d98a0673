"""Per-epoch metric sinks used as :class:`~ninjanet.training.Trainer` callbacks."""

from __future__ import annotations

import csv
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Mapping


class _EpochSink(ABC):
    """Truncate ``path`` on creation and append one record per epoch."""

    def __init__(self, path: str | Path, *, split: str = "train") -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split

    def _record(self, epoch: int, metrics: Mapping[str, float]) -> Dict[str, object]:
        record: Dict[str, object] = {"epoch": int(epoch), "split": self.split}
        record.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        return record

    @abstractmethod
    def _write(self, record: Mapping[str, object]) -> None:
        """Persist one epoch record."""

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        self._write(self._record(epoch, metrics))

    __call__ = on_epoch


class JsonlSink(_EpochSink):
    """One JSON object per line, tagged with the initialisation seed."""

    def __init__(
        self, path: str | Path, *, split: str = "train", seed: int | None = None
    ) -> None:
        super().__init__(path, split=split)
        self.seed = seed

    def _write(self, record: Mapping[str, object]) -> None:
        line = dict(record, seed=self.seed)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(line) + "\n")


class CsvSink(_EpochSink):
    """CSV whose columns are fixed by the first epoch written."""

    def __init__(self, path: str | Path, *, split: str = "train") -> None:
        super().__init__(path, split=split)
        self.fieldnames: List[str] = []

    def _write(self, record: Mapping[str, object]) -> None:
        header = not self.fieldnames
        if header:
            self.fieldnames = sorted(record)
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self.fieldnames, extrasaction="ignore")
            if header:
                writer.writeheader()
            writer.writerow(record)


__all__ = ["CsvSink", "JsonlSink"]
