"""
Tag value types and their per-unit byte sizes.
"""

from enum import IntEnum
from typing import Dict


class FieldType(IntEnum):
    UNSET = 0
    BYTE = 1
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5
    UNDEFINED = 7
    SRATIONAL = 10
    # sub-directory pointer, a LONG offset
    IFD = 13
    # not an on-disk code, only ever set by a tag table override
    ASCII_NO_NUL = 0xF0


# (bytes per unit, name)
FIELD_TYPES = {
    FieldType.BYTE: (1, 'Byte'),
    FieldType.ASCII: (1, 'ASCII'),
    FieldType.SHORT: (2, 'Short'),
    FieldType.LONG: (4, 'Long'),
    FieldType.RATIONAL: (8, 'Ratio'),
    FieldType.UNDEFINED: (1, 'Undefined'),
    FieldType.SRATIONAL: (8, 'Signed Ratio'),
    FieldType.IFD: (4, 'IFD'),
    FieldType.ASCII_NO_NUL: (1, 'ASCII (no NUL)'),
}  # type: Dict[FieldType, tuple]

_ON_DISK = {int(t) for t in FIELD_TYPES if t != FieldType.ASCII_NO_NUL}


def unit_size(field_type: int) -> int:
    """Bytes per unit, 0 for unset or unknown types."""
    entry = FIELD_TYPES.get(field_type)
    if entry is None:
        return 0
    return entry[0]


def is_valid(field_type: int) -> bool:
    return field_type in FIELD_TYPES


def type_name(field_type: int) -> str:
    entry = FIELD_TYPES.get(field_type)
    if entry is None:
        return 'Unknown'
    return entry[1]


def from_code(code: int) -> FieldType:
    """Map a raw on-disk type code, unknown codes become UNSET."""
    if code in _ON_DISK:
        return FieldType(code)
    return FieldType.UNSET
