"""Listings module: units, checklists, media and the governance workflow."""

from .governance import GovernanceStateMachine, trust_band, visibility_reasons
from .models import (
    ChecklistKind,
    MediaType,
    OperationalChecklist,
    StructuralChecklist,
    Unit,
    UnitMedia,
    UnitStatus,
)
from .routers import admin_router, router

__all__ = [
    "Unit",
    "UnitMedia",
    "StructuralChecklist",
    "OperationalChecklist",
    "UnitStatus",
    "MediaType",
    "ChecklistKind",
    "GovernanceStateMachine",
    "trust_band",
    "visibility_reasons",
    "router",
    "admin_router",
]
