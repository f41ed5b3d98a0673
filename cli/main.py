"""Command line entry point for ninjanet."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Iterable

from ninjanet.core.errors import NinjaError
from ninjanet.core.serialization import load_model
from ninjanet.core.types import RunResult
from ninjanet.inference import evaluate_file, predict_file
from ninjanet.training import pipelines


def _format_result(result: RunResult) -> str:
    payload = {
        "epochs": result.epochs,
        "steps": result.steps,
        "model": result.model_path,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
    }
    if result.test_metrics:
        payload["test"] = result.test_metrics
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    train = sub.add_parser("train", help="Train a model from an examples file")
    train.add_argument(
        "--preset",
        choices=sorted(pipelines.presets().keys()),
        help="Preset configuration to start from",
    )
    train.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    train.add_argument("--examples", help="Training examples file")
    train.add_argument("--test-examples", help="Held-out examples file to evaluate after training")
    train.add_argument(
        "--layer-sizes",
        type=int,
        nargs="+",
        help="Layer sizes including input and output, e.g. 3 4 2",
    )
    train.add_argument("--batch-size", type=int, help="Batch size (default 10)")
    train.add_argument("--epochs", type=int, help="Epochs (default 5)")
    train.add_argument("--learning-rate", type=float, help="Learning rate (default 0.7)")
    train.add_argument("--seed", type=int, help="Seed for weight initialisation")
    train.add_argument("--model", type=Path, help="Output model file")
    train.add_argument("--run-dir", type=Path, help="Directory for run artifacts")
    train.add_argument("--init-from", type=Path, help="Continue training from a model file")
    train.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )

    predict = sub.add_parser("predict", help="Write ranked predictions for an examples file")
    predict.add_argument("model", type=Path, help="Model file")
    predict.add_argument("examples", type=Path, help="Examples file")
    predict.add_argument("response", type=Path, help="Output file for predictions")
    predict.add_argument(
        "--verbose", action="store_true", help="Also list every output unit by rank"
    )

    evaluate = sub.add_parser("evaluate", help="Report top-1 accuracy on an examples file")
    evaluate.add_argument("model", type=Path, help="Model file")
    evaluate.add_argument("examples", type=Path, help="Examples file")

    sub.add_parser("presets", help="List available presets")
    return parser.parse_args(argv)


def build_train_config(args: argparse.Namespace) -> Dict[str, object]:
    if args.preset:
        config: Dict[str, object] = pipelines.load_preset(args.preset)
    else:
        config = {"data": {}, "model": {}, "train": {}}
    if args.config:
        config = pipelines.merge_config(config, pipelines.load_config_file(args.config))

    data = dict(config.get("data", {}))  # type: ignore[arg-type]
    model = dict(config.get("model", {}))  # type: ignore[arg-type]
    train = dict(config.get("train", {}))  # type: ignore[arg-type]
    if args.examples:
        data["train"] = args.examples
    if args.test_examples:
        data["test"] = args.test_examples
    if args.layer_sizes:
        model["layer_sizes"] = list(args.layer_sizes)
    if args.init_from:
        model["init_from"] = str(args.init_from)
    overrides = {
        "batch_size": args.batch_size,
        "epochs": args.epochs,
        "learning_rate": args.learning_rate,
        "seed": args.seed,
        "model_path": str(args.model) if args.model else None,
        "run_dir": str(args.run_dir) if args.run_dir else None,
    }
    train.update({key: value for key, value in overrides.items() if value is not None})
    config.update({"data": data, "model": model, "train": train})
    return config


def _train(args: argparse.Namespace) -> None:
    config = build_train_config(args)
    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))
    result = pipelines.run_pipeline(config)
    print(_format_result(result))


def _predict(args: argparse.Namespace) -> None:
    network = load_model(args.model)
    count = predict_file(network, args.examples, args.response, verbose=args.verbose)
    print(json.dumps({"examples": count, "response": str(args.response)}, sort_keys=True))


def _evaluate(args: argparse.Namespace) -> None:
    network = load_model(args.model)
    print(json.dumps(evaluate_file(network, args.examples), sort_keys=True))


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "presets":
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    handlers = {"train": _train, "predict": _predict, "evaluate": _evaluate}
    try:
        handlers[args.command](args)
    except (NinjaError, ValueError, FileNotFoundError, KeyError) as exc:
        raise SystemExit(f"error: {exc}") from exc


if __name__ == "__main__":
    main()
