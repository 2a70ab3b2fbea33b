"""
Explicit optional-field values.

A listing's optional text fields are either ``Some(value)`` or ``ABSENT``.
Keeping the two apart means an empty string is never mistaken for an omitted
field: the conversion happens once, in :func:`optional_text`.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class _Absent(Enum):
    ABSENT = "ABSENT"

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent.ABSENT


@dataclass(frozen=True)
class Some(Generic[T]):
    value: T


OptionalField = Union[Some[T], _Absent]


def optional_text(raw: str | None) -> "OptionalField[str]":
    """Trim raw form input; blank or missing input becomes ABSENT."""
    if raw is None:
        return ABSENT
    trimmed = raw.strip()
    return Some(trimmed) if trimmed else ABSENT


def to_nullable(field: "OptionalField[T]") -> T | None:
    """Unwrap for the storage boundary, where absent is written as null."""
    if isinstance(field, Some):
        return field.value
    return None
