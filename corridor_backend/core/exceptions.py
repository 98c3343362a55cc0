"""
Custom exception classes for consistent error handling across all modules.

Every exception carries the HTTP status the API layer answers with.
"""

from typing import Any


class CorridorException(Exception):
    """Base exception for all corridor backend errors."""

    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(CorridorException):
    """Raised when data validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ):
        if field:
            full_message = f"Validation error for field '{field}': {message}"
        else:
            full_message = message
        super().__init__(full_message, details)
        self.field = field
        self.value = value


class NotFoundError(CorridorException):
    """Raised when a resource is not found."""

    status_code = 404

    def __init__(
        self, message: str = "Resource not found", details: dict[str, Any] | None = None
    ):
        super().__init__(message, details)


class PermissionError(CorridorException):
    """Raised when the caller lacks permission to perform an action."""

    status_code = 403

    def __init__(
        self, action: str, resource_type: str, details: dict[str, Any] | None = None
    ):
        message = f"Permission denied: cannot {action} {resource_type}"
        super().__init__(message, details)
        self.action = action
        self.resource_type = resource_type


class AuthenticationError(CorridorException):
    """Raised when authentication fails."""

    status_code = 401

    def __init__(
        self,
        message: str = "Authentication failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)


class ConflictError(CorridorException):
    """Raised when a write conflicts with the current state of a resource."""

    status_code = 409


class CapacityError(ConflictError):
    """Raised when an occupancy write would break a unit's capacity."""


# ----- Occupancy allocation -----


class StudentAlreadyActiveError(ConflictError):
    """Raised when the student already holds an active occupancy."""

    def __init__(self, student_id: int):
        super().__init__(
            "Student is already checked into a unit", {"student_id": student_id}
        )
        self.student_id = student_id


class InvalidCapacityError(ValidationError):
    """Raised when a unit has no usable occupant slots."""

    def __init__(self, unit_id: int, capacity: int):
        super().__init__(
            "Unit capacity is invalid for occupant allocation",
            details={"unit_id": unit_id, "capacity": capacity},
        )


class CapacityReachedError(CapacityError):
    """Raised when a unit is already at its approved capacity."""

    def __init__(self, unit_id: int, capacity: int):
        super().__init__(
            "Unit capacity reached",
            {"unit_id": unit_id, "capacity": capacity},
        )
        self.unit_id = unit_id
        self.capacity = capacity


class NoSlotAvailableError(CapacityError):
    """Raised when every occupant index in a room is taken."""

    def __init__(self, unit_id: int):
        super().__init__("No occupant slot available", {"unit_id": unit_id})


class CheckInConflictError(ConflictError):
    """Raised when check-in keeps colliding on occupant identifiers."""

    def __init__(self, unit_id: int, attempts: int):
        super().__init__(
            "Unable to allocate occupant ID. Please retry.",
            {"unit_id": unit_id, "attempts": attempts},
        )


class AlreadyCheckedOutError(ConflictError):
    """Raised when an occupancy has already ended."""

    def __init__(self, occupancy_id: int):
        super().__init__(
            "Occupancy already checked out", {"occupancy_id": occupancy_id}
        )
