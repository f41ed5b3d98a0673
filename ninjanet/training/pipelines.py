"""Config-driven training runs."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, Iterable, Mapping, Sequence

from ..core.network import DEFAULT_SEED, Network
from ..core.serialization import load_model
from ..core.types import Batch, RunResult
from ..data.examples import ExampleFile, ExampleLines
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from .trainer import Trainer

DEFAULT_BATCH_SIZE = 10
DEFAULT_EPOCHS = 5
DEFAULT_LEARNING_RATE = 0.7

_PRESETS: Dict[str, Mapping[str, object]] = {
    "mnist": {
        "data": {"train": "data/mnist.train", "test": "data/mnist.test"},
        "model": {"layer_sizes": [784, 30, 10], "activation": "sigmoid"},
        "train": {
            "batch_size": 10,
            "epochs": 5,
            "learning_rate": 0.7,
            "seed": DEFAULT_SEED,
            "run_dir": "runs/mnist",
        },
    },
    "nand": {
        "data": {
            # label 1 means "true": NAND is false only for 1 1
            "train": ["1", "1 1:1", "1 0:1", "0 0:1 1:1"],
        },
        "model": {"layer_sizes": [2, 2, 2], "activation": "sigmoid"},
        "train": {
            "batch_size": 4,
            "epochs": 5000,
            "learning_rate": 0.5,
            "seed": DEFAULT_SEED,
            "run_dir": "runs/nand",
        },
    },
}


def presets() -> Mapping[str, Mapping[str, object]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def load_preset(name: str) -> Dict[str, object]:
    try:
        return deepcopy(dict(_PRESETS[name]))
    except KeyError:
        available = ", ".join(sorted(_PRESETS))
        raise KeyError(f"Unknown preset {name!r}. Available presets: {available}") from None


def load_config_file(path: str | Path) -> Dict[str, object]:
    """Read a JSON config, or YAML when PyYAML is installed."""

    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yml", ".yaml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")
    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return dict(data)


def merge_config(base: Mapping[str, object], override: Mapping[str, object]) -> Dict[str, object]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_config(merged[key], value)  # type: ignore[arg-type]
        else:
            merged[key] = deepcopy(value)
    return merged


def _example_source(
    source: object, batch_size: int, num_inputs: int, num_outputs: int
) -> Iterable[Batch]:
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"example file not found: {path}")
        return ExampleFile(path, batch_size, num_inputs, num_outputs)
    if isinstance(source, Sequence):
        return ExampleLines([str(line) for line in source], batch_size, num_inputs, num_outputs)
    raise TypeError(f"examples must be a file path or a list of lines, got {type(source).__name__}")


def _resolve_run_dir(train_cfg: Mapping[str, object]) -> Path:
    if train_cfg.get("run_dir"):
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp


def _build_network(model_cfg: Mapping[str, object], seed: int) -> Network:
    activation = str(model_cfg.get("activation", "sigmoid"))
    init_from = model_cfg.get("init_from")
    if init_from:
        network = load_model(str(init_from), activation=activation)
        sizes = model_cfg.get("layer_sizes")
        if sizes is not None and [int(s) for s in sizes] != network.layer_sizes:  # type: ignore[union-attr]
            raise ValueError(
                f"model.layer_sizes {list(sizes)} does not match {init_from} "  # type: ignore[arg-type]
                f"({network.layer_sizes})"
            )
        return network
    if "layer_sizes" not in model_cfg:
        raise KeyError("model.layer_sizes is required")
    return Network.from_layer_sizes(
        model_cfg["layer_sizes"], seed=seed, activation=activation  # type: ignore[arg-type]
    )


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train a network as described by ``config`` and write its artifacts.

    The run directory receives ``model.txt`` (unless ``train.model_path``
    points elsewhere), per-epoch ``metrics.jsonl`` and ``metrics.csv``,
    ``metrics_test.json`` when a test set is configured, the resolved
    ``config.json`` and a ``manifest.json``.
    """

    for section in ("data", "model", "train"):
        if section not in config:
            raise KeyError(f"config is missing the {section!r} section")
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]
    if "train" not in data_cfg:
        raise KeyError("data.train is required")

    batch_size = int(train_cfg.get("batch_size", DEFAULT_BATCH_SIZE))
    epochs = int(train_cfg.get("epochs", DEFAULT_EPOCHS))
    learning_rate = float(train_cfg.get("learning_rate", DEFAULT_LEARNING_RATE))
    seed = int(train_cfg.get("seed", DEFAULT_SEED))

    network = _build_network(model_cfg, seed)
    sizes = network.layer_sizes
    train_source = _example_source(data_cfg["train"], batch_size, sizes[0], sizes[-1])

    run_dir = _resolve_run_dir(train_cfg)
    run_dir.mkdir(parents=True, exist_ok=True)
    model_path = Path(str(train_cfg.get("model_path") or run_dir / "model.txt"))

    _print_startup_summary(
        layer_sizes=sizes,
        param_count=network.parameter_count(),
        batch_size=batch_size,
        epochs=epochs,
        learning_rate=learning_rate,
        seed=seed,
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", split="train", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", split="train")
    trainer = Trainer(
        network,
        learning_rate,
        callbacks=[jsonl, csv_sink],
        metric_names=train_cfg.get("metrics", "default"),  # type: ignore[arg-type]
    )
    result = trainer.run(train_source, epochs, model_path=model_path)

    test_metrics: Dict[str, float] = {}
    artifacts = {
        "model": result.model_path,
        "metrics": str(jsonl.path),
        "metrics_csv": str(csv_sink.path),
    }
    if data_cfg.get("test"):
        test_source = _example_source(data_cfg["test"], batch_size, sizes[0], sizes[-1])
        test_metrics = dict(trainer.evaluate(test_source))
        test_path = run_dir / "metrics_test.json"
        test_path.write_text(json.dumps(test_metrics, indent=2))
        artifacts["metrics_test"] = str(test_path)

    resolved = json.loads(json.dumps(config))
    (run_dir / "config.json").write_text(json.dumps(resolved, indent=2))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=resolved,
        model=network.describe(),
        artifacts=artifacts,
    )

    return RunResult(
        epochs=result.epochs,
        steps=result.steps,
        model_path=result.model_path,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        test_metrics=test_metrics,
    )


def _print_startup_summary(
    *,
    layer_sizes: Sequence[int],
    param_count: int,
    batch_size: int,
    epochs: int,
    learning_rate: float,
    seed: int,
) -> None:
    print("=== ninjanet run ===")
    print(f"Layer sizes   : {list(layer_sizes)}")
    print(f"Parameters    : {param_count}")
    print(f"Batch size    : {batch_size}")
    print(f"Epochs        : {epochs}")
    print(f"Learning rate : {learning_rate}")
    print(f"Seed          : {seed}")
    print("====================")


__all__ = [
    "load_config_file",
    "load_preset",
    "merge_config",
    "presets",
    "run_pipeline",
]
