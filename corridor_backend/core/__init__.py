"""Core infrastructure for the corridor backend."""

from .exceptions import (
    AlreadyCheckedOutError,
    AuthenticationError,
    CapacityError,
    CapacityReachedError,
    CheckInConflictError,
    ConflictError,
    CorridorException,
    InvalidCapacityError,
    NoSlotAvailableError,
    NotFoundError,
    PermissionError,
    StudentAlreadyActiveError,
    ValidationError,
)
from .locks import UnitLockRegistry, unit_locks

__all__ = [
    "CorridorException",
    "ValidationError",
    "NotFoundError",
    "PermissionError",
    "AuthenticationError",
    "ConflictError",
    "CapacityError",
    "StudentAlreadyActiveError",
    "InvalidCapacityError",
    "CapacityReachedError",
    "NoSlotAvailableError",
    "CheckInConflictError",
    "AlreadyCheckedOutError",
    "UnitLockRegistry",
    "unit_locks",
]
