"""CSV files read as raw string records."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pandas as pd

from .registry import Record, RecordSet, register_dataset
from .utils import split_records


def read_csv_records(
    path: str | Path,
    *,
    has_header: bool = True,
    delimiter: str = ",",
) -> List[Record]:
    """Read ``path`` into lists of string fields, label last.

    Values are kept verbatim (no NA coercion, no type inference) so that
    number parsing happens in the network with its own error reporting.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")
    df = pd.read_csv(
        path,
        sep=delimiter,
        header=0 if has_header else None,
        dtype=str,
        keep_default_na=False,
        skipinitialspace=True,
    )
    return [[str(value) for value in row] for row in df.itertuples(index=False, name=None)]


@register_dataset("csv")
def load_csv(
    *,
    csv_path: str | Path | None = None,
    has_header: bool = True,
    delimiter: str = ",",
    test_split: float = 0.2,
    seed: int = 0,
    **_: object,
) -> RecordSet:
    """Load a binary classification dataset from a CSV file."""

    if csv_path is None:
        raise ValueError("The csv dataset requires `csv_path`")
    records = read_csv_records(csv_path, has_header=has_header, delimiter=delimiter)
    if not records:
        raise ValueError(f"CSV file {csv_path} contains no records")
    train, test = split_records(records, test_split=test_split, seed=seed)

    return RecordSet(
        name="csv",
        train=train,
        test=test,
        record_length=len(records[0]),
        provenance={
            "path": str(csv_path),
            "has_header": has_header,
            "delimiter": delimiter,
            "test_split": test_split,
            "seed": seed,
            "records": len(records),
        },
    )


__all__ = ["read_csv_records", "load_csv"]
