import pytest

from corridor_backend.core.exceptions import ValidationError
from corridor_backend.modules.occupancy.occupant_id import (
    decode_occupant_id,
    encode_occupant_id,
    is_valid_occupant_id,
)


def test_encode_pads_every_component():
    assert encode_occupant_id(12, 7, 45, 45, 1) == "120070450451"


def test_decode_splits_components():
    parts = decode_occupant_id("120070450451")

    assert parts.city_code == 12
    assert parts.corridor_code == 7
    assert parts.hostel_code == 45
    assert parts.room_number == 45
    assert parts.occupant_index == 1


@pytest.mark.parametrize(
    "args",
    [
        (100, 1, 1, 1, 1),
        (1, 1000, 1, 1, 1),
        (1, 1, -1, 1, 1),
        (1, 1, 1, 1, 0),
        (1, 1, 1, 1, 10),
    ],
)
def test_encode_rejects_out_of_range_components(args):
    with pytest.raises(ValidationError):
        encode_occupant_id(*args)


@pytest.mark.parametrize("value", ["12007045045", "1200704504511", "12007045045a", ""])
def test_decode_rejects_malformed_ids(value):
    assert not is_valid_occupant_id(value)
    with pytest.raises(ValidationError):
        decode_occupant_id(value)


def test_decode_rejects_zero_index():
    with pytest.raises(ValidationError):
        decode_occupant_id("120070450450")
