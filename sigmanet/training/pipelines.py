"""Config-driven assembly of datasets, networks and training runs."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, Mapping

import numpy as np

from ..core.network import LEARNING_RATE, Network
from ..core.types import RunResult
from ..data import get_dataset
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .trainer import Trainer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-online": {
        "data": {"name": "xor", "options": {}},
        "model": {
            "hidden_size": 12,
            "output_size": 1,
            "learning_rate": 0.05,
            "label_mode": "feature",
            "bias_update": "per_synapse",
        },
        "train": {
            "epochs": 500,
            "seed": 7,
            "shuffle": True,
            "run_dir": "runs/xor-online",
            "enable_plots": False,
        },
    },
    "xor-label-excluded": {
        "data": {"name": "xor", "options": {}},
        "model": {
            "hidden_size": 12,
            "output_size": 1,
            "learning_rate": 0.05,
            "label_mode": "excluded",
            "bias_update": "per_neuron",
        },
        "train": {
            "epochs": 500,
            "seed": 7,
            "shuffle": True,
            "run_dir": "runs/xor-label-excluded",
            "enable_plots": False,
        },
    },
    "csv-binary": {
        "data": {
            "name": "csv",
            "options": {"has_header": True, "test_split": 0.2, "seed": 0},
        },
        "model": {
            "hidden_size": 12,
            "output_size": 1,
            "learning_rate": LEARNING_RATE,
            "label_mode": "feature",
            "bias_update": "per_synapse",
        },
        "train": {
            "epochs": 50,
            "seed": 0,
            "shuffle": True,
            "run_dir": "runs/csv-binary",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def read_config_file(path: Path) -> Mapping[str, object]:
    """Load a JSON or YAML mapping from ``path``."""

    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = read_config_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    raise KeyError(
                        f"Preset {file.name} is missing required sections: "
                        f"{', '.join(sorted(missing))}"
                    )
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {
        name: deepcopy(cfg) for name, cfg in _PRESETS.items()
    }
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def build_network(
    model_cfg: Mapping[str, object], input_size: int, seed: int
) -> Network:
    """Construct a :class:`Network` from the ``model`` config section."""

    configured = model_cfg.get("input_size")
    if configured is not None and int(configured) != input_size:
        raise ValueError(
            f"Configured input_size={configured} but records have {input_size} fields"
        )
    return Network(
        input_size,
        int(model_cfg.get("hidden_size", 12)),
        int(model_cfg.get("output_size", 1)),
        rng=np.random.default_rng(seed),
        learning_rate=float(model_cfg.get("learning_rate", LEARNING_RATE)),
        label_mode=str(model_cfg.get("label_mode", "feature")),
        bias_update=str(model_cfg.get("bias_update", "per_synapse")),
    )


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    data_cfg = dict(config["data"])
    model_cfg = dict(config.get("model", {}))
    train_cfg = dict(config.get("train", {}))

    dataset = get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options") or {}))
    seed = int(train_cfg.get("seed", 0))
    network = build_network(model_cfg, dataset.record_length, seed)

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)
    metrics_cfg = train_cfg.get("metrics", "default")
    if not isinstance(metrics_cfg, str):
        metrics_cfg = ",".join(str(item) for item in metrics_cfg)

    _print_startup_summary(dataset.name, dataset.splits, network)

    train_jsonl = JsonlSink(run_dir / "metrics_train.jsonl", split="train", seed=seed)
    train_csv = CsvSink(run_dir / "metrics_train.csv", split="train")
    test_jsonl = JsonlSink(run_dir / "metrics_test.jsonl", split="test", seed=seed)
    test_csv = CsvSink(run_dir / "metrics_test.csv", split="test")
    plots = PlotAdapter(
        run_dir,
        enable_plots=bool(train_cfg.get("enable_plots", False)),
        every=int(train_cfg.get("plot_every", 1)),
    )

    trainer = Trainer(
        network,
        callbacks=[plots],
        skip_malformed=bool(train_cfg.get("skip_malformed", True)),
    )
    tolerance = train_cfg.get("tolerance")
    patience = train_cfg.get("early_stopping_patience")
    result = trainer.run(
        dataset.train,
        epochs=int(train_cfg.get("epochs", 1)),
        seed=seed + 1,
        shuffle=bool(train_cfg.get("shuffle", True)),
        test_records=dataset.test,
        metric_names=metrics_cfg,
        split_loggers={"train": [train_jsonl, train_csv], "test": [test_jsonl, test_csv]},
        tolerance=float(tolerance) if tolerance is not None else None,
        early_stopping_patience=int(patience) if patience is not None else None,
    )
    plots.close()

    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
        topology=network.describe(),
    )
    summary_path = write_summary(
        train_jsonl.path,
        run_dir / "summary.json",
        tail=int(train_cfg.get("summary_tail", 32)),
    )
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    return RunResult(
        steps=result.steps,
        epochs=result.epochs,
        skipped=result.skipped,
        is_trained=result.is_trained,
        metrics_path=str(train_jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if train_cfg.get("run_dir"):
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    dataset_name: str, splits: Mapping[str, int], network: Network
) -> None:
    topology = network.describe()
    print("=== SigmaNet run ===")
    print(f"Dataset       : {dataset_name} {dict(splits)}")
    print(
        "Topology      : "
        f"{topology['feature_count']}-{topology['hidden_size']}-{topology['output_size']}"
    )
    print(f"Learning rate : {topology['learning_rate']}")
    print(f"Label mode    : {topology['label_mode']}")
    print(f"Bias update   : {topology['bias_update']}")
    params = topology["synapses"] + topology["hidden_size"] + topology["output_size"]
    print(f"Parameters    : {params}")
    print("====================")


__all__ = ["build_network", "load_preset", "presets", "read_config_file", "run_pipeline"]
