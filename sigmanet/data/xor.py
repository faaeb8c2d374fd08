"""The XOR truth table as string records."""

from __future__ import annotations

from typing import List

from .registry import Record, RecordSet, register_dataset

_TRUTH_TABLE = (
    ("0", "0", "0"),
    ("0", "1", "1"),
    ("1", "0", "1"),
    ("1", "1", "0"),
)


def xor_records() -> List[Record]:
    """Return the four ``[x1, x2, label]`` rows of the XOR table."""

    return [list(row) for row in _TRUTH_TABLE]


@register_dataset("xor")
def load_xor(*, repeat: int = 1, **_: object) -> RecordSet:
    """XOR table, optionally repeated; the training set doubles as test set."""

    if repeat < 1:
        raise ValueError("repeat must be >= 1")
    rows = xor_records() * int(repeat)
    return RecordSet(
        name="xor",
        train=rows,
        test=xor_records(),
        record_length=3,
        provenance={"type": "xor", "repeat": int(repeat)},
    )


__all__ = ["xor_records", "load_xor"]
