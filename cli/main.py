"""Command line entry point for SigmaNet training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from sigmanet.core.types import BiasUpdate, LabelMode
from sigmanet.training import pipelines


def _format_result(result) -> str:
    payload = {
        "steps": result.steps,
        "epochs": result.epochs,
        "skipped": result.skipped,
        "is_trained": result.is_trained,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "summary": result.summary_path,
    }
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor-online",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--csv-path", help="Train on a CSV file (label in the last column)")
    parser.add_argument(
        "--no-header",
        action="store_true",
        help="The CSV file has no header row",
    )
    parser.add_argument("--epochs", type=int, help="Number of passes over the records")
    parser.add_argument("--seed", type=int, help="Seed for initialisation and shuffling")
    parser.add_argument("--learning-rate", type=float, help="Fixed learning rate")
    parser.add_argument("--hidden-size", type=int, help="Number of hidden neurons")
    parser.add_argument(
        "--label-mode",
        choices=[mode.value for mode in LabelMode],
        help="Wire the label into the input layer or use it as target only",
    )
    parser.add_argument(
        "--bias-update",
        choices=[mode.value for mode in BiasUpdate],
        help="Bias decrements per backward pass",
    )
    parser.add_argument("--run-dir", help="Directory receiving metrics and manifest")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Render the loss curve to loss.png"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def resolve_config(args: argparse.Namespace) -> dict:
    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        override = dict(pipelines.read_config_file(args.config))
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = _merge(config, override)

    if args.csv_path:
        options = {"csv_path": args.csv_path, "has_header": not args.no_header}
        if config.get("data", {}).get("name") == "csv":
            options = _merge(dict(config["data"].get("options") or {}), options)
        config["data"] = {"name": "csv", "options": options}

    model = config.setdefault("model", {})
    train = config.setdefault("train", {})
    if args.learning_rate is not None:
        model["learning_rate"] = float(args.learning_rate)
    if args.hidden_size is not None:
        model["hidden_size"] = int(args.hidden_size)
    if args.label_mode:
        model["label_mode"] = args.label_mode
    if args.bias_update:
        model["bias_update"] = args.bias_update
    if args.epochs is not None:
        train["epochs"] = int(args.epochs)
    if args.seed is not None:
        train["seed"] = int(args.seed)
    if args.run_dir:
        train["run_dir"] = args.run_dir
    if args.enable_plots:
        train["enable_plots"] = True
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = resolve_config(args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
