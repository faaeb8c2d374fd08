"""Dataset registry and record-set contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, MutableMapping

Record = List[str]


@dataclass(frozen=True)
class RecordSet:
    """Raw string records split into train and test partitions.

    Attributes
    ----------
    name:
        Registry name of the dataset.
    train, test:
        Records as lists of string fields, label last.
    record_length:
        Number of fields per record; the network's ``input_size``.
    provenance:
        Free-form metadata stored in the run manifest.
    """

    name: str
    train: List[Record]
    test: List[Record]
    record_length: int
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def splits(self) -> Dict[str, int]:
        return {"train": len(self.train), "test": len(self.test)}


DatasetFactory = Callable[..., RecordSet]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory, as a decorator or directly.

    ::

        @register_dataset("xor")
        def make_xor(**kwargs):
            ...

        register_dataset("xor", make_xor)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(
    dataset: str,
    /,
    **options: Any,
) -> RecordSet:
    """Return the :class:`RecordSet` built by the factory named ``dataset``."""

    if dataset not in _REGISTRY:
        raise KeyError(f"Unknown dataset: {dataset}")
    records = _REGISTRY[dataset](**options)
    _validate(records)
    return records


def available_datasets() -> Iterable[str]:
    return sorted(_REGISTRY)


def _validate(records: RecordSet) -> None:
    if records.record_length < 2:
        raise ValueError(
            f"Dataset {records.name!r} records need at least one feature and a label"
        )
    if not records.train:
        raise ValueError(f"Dataset {records.name!r} has no training records")


__all__ = [
    "Record",
    "RecordSet",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
