"""Occupancy module: check-in/check-out allocation and occupant IDs."""

from .models import Occupancy, Occupant
from .occupant_id import decode_occupant_id, encode_occupant_id
from .routers import router

__all__ = [
    "Occupancy",
    "Occupant",
    "encode_occupant_id",
    "decode_occupant_id",
    "router",
]
