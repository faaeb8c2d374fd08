"""Record sources and the dataset registry."""

# Built-in datasets register themselves on import.
from . import csv_records as _csv_records  # noqa: F401
from . import xor as _xor  # noqa: F401
from ..core.fields import parse_field, parse_fields
from .csv_records import read_csv_records
from .registry import RecordSet, available_datasets, get_dataset, register_dataset
from .utils import split_records
from .xor import xor_records

__all__ = [
    "RecordSet",
    "available_datasets",
    "get_dataset",
    "parse_field",
    "parse_fields",
    "read_csv_records",
    "register_dataset",
    "split_records",
    "xor_records",
]
