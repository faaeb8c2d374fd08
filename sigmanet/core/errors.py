"""Exceptions raised by the network core."""

from __future__ import annotations


class NetworkError(Exception):
    """Base class for all SigmaNet errors."""


class FormatError(NetworkError, ValueError):
    """A record field is not a period-decimal floating point literal."""

    def __init__(self, index: int, value: object) -> None:
        super().__init__(f"Field {index} is not a valid number: {value!r}")
        self.index = index
        self.value = value


class SizeMismatchError(NetworkError, ValueError):
    """A record does not have the length the input layer was sized for."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Expected {expected} fields (features plus label), got {actual}"
        )
        self.expected = expected
        self.actual = actual


class NetworkStateError(NetworkError, RuntimeError):
    """An operation was called in the wrong lifecycle state."""


__all__ = ["NetworkError", "FormatError", "SizeMismatchError", "NetworkStateError"]
