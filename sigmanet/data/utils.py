"""Utility helpers for record loaders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Sequence, Tuple, TypeVar

import numpy as np

T = TypeVar("T")


@dataclass(frozen=True)
class SplitIndices:
    """Indices for the train/test partitions."""

    train: np.ndarray
    test: np.ndarray

    @property
    def sizes(self) -> Mapping[str, int]:
        return {"train": int(self.train.size), "test": int(self.test.size)}


def deterministic_split(
    n_samples: int,
    *,
    test_split: float = 0.2,
    seed: int = 0,
) -> SplitIndices:
    """Return seeded train/test indices; training order is preserved."""

    if not 0 <= test_split < 1:
        raise ValueError("test_split must be in [0, 1)")

    rng = np.random.default_rng(seed)
    indices = np.arange(n_samples)
    rng.shuffle(indices)

    test_size = int(round(n_samples * test_split))
    # At least one test record when a test split was asked for
    test_size = min(max(test_size, 1 if test_split > 0 else 0), n_samples)
    if n_samples - test_size <= 0:
        raise ValueError("Not enough records for the requested split")

    return SplitIndices(
        train=np.sort(indices[test_size:]),
        test=np.sort(indices[:test_size]),
    )


def split_records(
    records: Sequence[T], *, test_split: float = 0.2, seed: int = 0
) -> Tuple[List[T], List[T]]:
    """Partition ``records`` into ``(train, test)`` lists."""

    if test_split == 0:
        return list(records), []
    splits = deterministic_split(len(records), test_split=test_split, seed=seed)
    train = [records[int(i)] for i in splits.train]
    test = [records[int(i)] for i in splits.test]
    return train, test


__all__ = ["SplitIndices", "deterministic_split", "split_records"]
