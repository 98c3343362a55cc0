"""Occupant public ID codec.

A public ID is 12 digits: city (2) + corridor (3) + hostel (3) + room (3) +
occupant index (1).
"""

import re
from typing import NamedTuple

from ...core.exceptions import ValidationError

OCCUPANT_ID_LENGTH = 12
OCCUPANT_ID_PATTERN = re.compile(r"^\d{12}$")

MAX_OCCUPANT_INDEX = 9

_COMPONENT_RANGES = {
    "city_code": (0, 99),
    "corridor_code": (0, 999),
    "hostel_code": (0, 999),
    "room_number": (0, 999),
    "occupant_index": (1, MAX_OCCUPANT_INDEX),
}


class OccupantIdParts(NamedTuple):
    city_code: int
    corridor_code: int
    hostel_code: int
    room_number: int
    occupant_index: int


def _check_component(name: str, value: int) -> None:
    low, high = _COMPONENT_RANGES[name]
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ValidationError(
            f"{name} must be an integer from {low} to {high}", field=name, value=value
        )


def validate_parts(
    city_code: int,
    corridor_code: int,
    hostel_code: int,
    room_number: int,
    occupant_index: int = 1,
) -> None:
    """Check every component range.

    Raises:
        ValidationError: If a component is out of range
    """
    parts = OccupantIdParts(
        city_code, corridor_code, hostel_code, room_number, occupant_index
    )
    for name, value in parts._asdict().items():
        _check_component(name, value)


def encode_occupant_id(
    city_code: int,
    corridor_code: int,
    hostel_code: int,
    room_number: int,
    occupant_index: int,
) -> str:
    """Build a 12-digit public occupant ID.

    Example:
        >>> encode_occupant_id(12, 7, 45, 45, 1)
        '120070450451'

    Raises:
        ValidationError: If a component is out of range
    """
    validate_parts(city_code, corridor_code, hostel_code, room_number, occupant_index)
    return (
        f"{city_code:02d}{corridor_code:03d}{hostel_code:03d}"
        f"{room_number:03d}{occupant_index:d}"
    )


def is_valid_occupant_id(value: str) -> bool:
    return isinstance(value, str) and bool(OCCUPANT_ID_PATTERN.match(value))


def decode_occupant_id(value: str) -> OccupantIdParts:
    """Split a public occupant ID into its components.

    Raises:
        ValidationError: If the value is not 12 digits or the index is 0
    """
    value = (value or "").strip()
    if not is_valid_occupant_id(value):
        raise ValidationError(
            "Occupant ID must be exactly 12 digits", field="occupant_id", value=value
        )
    parts = OccupantIdParts(
        city_code=int(value[0:2]),
        corridor_code=int(value[2:5]),
        hostel_code=int(value[5:8]),
        room_number=int(value[8:11]),
        occupant_index=int(value[11]),
    )
    _check_component("occupant_index", parts.occupant_index)
    return parts
