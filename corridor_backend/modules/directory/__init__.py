"""Directory module: corridors, landlords and students."""

from .models import Corridor, Landlord, Student
from .routers import profiles_router, router

__all__ = [
    "Corridor",
    "Landlord",
    "Student",
    "router",
    "profiles_router",
]
