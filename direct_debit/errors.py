"""Typed validation failures raised while building a direct-debit collection."""
from __future__ import annotations

from typing import Iterable, Tuple

__all__ = [
    "ValidationError",
    "MissingRequiredField",
    "MissingConditionalField",
    "InconsistentSequenceType",
    "InvalidFieldValue",
]


class ValidationError(Exception):
    """Base class for every rejected settings or payment input."""

    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.fields: Tuple[str, ...] = tuple(fields)


class MissingRequiredField(ValidationError):
    """One or more mandatory keys are absent."""

    def __init__(self, fields: Iterable[str]) -> None:
        fields = tuple(fields)
        names = ", ".join(f"'{f}'" for f in fields)
        super().__init__(f"missing required input(s): {names}", fields)


class MissingConditionalField(ValidationError):
    """Amendment indicator set without any original mandate detail."""

    def __init__(self, candidates: Iterable[str]) -> None:
        candidates = tuple(candidates)
        names = ", ".join(f"'{f}'" for f in candidates)
        super().__init__(
            "'amendment' is true, so at least one of the following inputs is "
            f"required: {names}",
            candidates,
        )


class InconsistentSequenceType(ValidationError):
    """SMNDA requested on a collection that is not first-in-sequence."""

    def __init__(self, sequence_type: str) -> None:
        super().__init__(
            "'original_debtor_agent' is 'SMNDA', so the collection sequence type "
            f"has to be 'FRST' (got '{sequence_type}')",
            ("original_debtor_agent",),
        )
        self.sequence_type = sequence_type


class InvalidFieldValue(ValidationError):
    """A present field could not be coerced to its declared type or range."""
