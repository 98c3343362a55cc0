"""Listing API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ..auth.dependencies import AdminUser, CurrentUser, LandlordUser
from ..commons import BaseResponse, PaginatedResponse
from ..directory.services import require_landlord
from . import crud, services
from .models import ChecklistKind
from .schemas import (
    OperationalChecklistPatch,
    OperationalChecklistPut,
    OperationalChecklistResponse,
    StructuralChecklistPatch,
    StructuralChecklistPut,
    StructuralChecklistResponse,
    UnitCreate,
    UnitMediaCreate,
    UnitMediaResponse,
    UnitResponse,
    UnitReview,
    UnitStatusUpdate,
)

router = APIRouter(prefix="/units", tags=["Units"])
admin_router = APIRouter(prefix="/admin/units", tags=["Unit Review"])


# ----- Landlord -----


@router.post("", response_model=BaseResponse[UnitResponse], status_code=201)
async def create_unit(
    data: UnitCreate,
    current_user: LandlordUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a draft unit."""
    landlord = await require_landlord(db, current_user.id)
    unit = await services.create_unit(db, landlord.id, data)
    return BaseResponse(
        success=True,
        message="Unit created successfully",
        data=UnitResponse.model_validate(unit),
    )


@router.get("/mine", response_model=BaseResponse[list[UnitResponse]])
async def list_my_units(
    current_user: LandlordUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    landlord = await require_landlord(db, current_user.id)
    units = await crud.get_units_by_landlord(db, landlord.id)
    return BaseResponse(
        success=True,
        data=[UnitResponse.model_validate(u) for u in units],
    )


@router.get(
    "/corridor/{corridor_id}",
    response_model=BaseResponse[PaginatedResponse[UnitResponse]],
)
async def list_visible_units(
    corridor_id: int,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    """Units visible to students in a corridor, best trust first."""
    units = await crud.get_visible_units(db, corridor_id)
    start = (page - 1) * page_size
    items = [UnitResponse.model_validate(u) for u in units[start : start + page_size]]
    return BaseResponse(
        success=True,
        data=PaginatedResponse[UnitResponse].from_items(
            items, len(units), page, page_size
        ),
    )


@router.put(
    "/{unit_id}/structural-checklist",
    response_model=BaseResponse[StructuralChecklistResponse],
)
async def declare_structural_checklist(
    unit_id: int,
    data: StructuralChecklistPut,
    current_user: LandlordUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    landlord = await require_landlord(db, current_user.id)
    checklist = await services.declare_structural_checklist(
        db, unit_id, landlord.id, data
    )
    return BaseResponse(
        success=True,
        data=StructuralChecklistResponse.model_validate(checklist),
    )


@router.put(
    "/{unit_id}/operational-checklist",
    response_model=BaseResponse[OperationalChecklistResponse],
)
async def declare_operational_checklist(
    unit_id: int,
    data: OperationalChecklistPut,
    current_user: LandlordUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    landlord = await require_landlord(db, current_user.id)
    checklist = await services.declare_operational_checklist(
        db, unit_id, landlord.id, data
    )
    return BaseResponse(
        success=True,
        data=OperationalChecklistResponse.model_validate(checklist),
    )


@router.post(
    "/{unit_id}/media", response_model=BaseResponse[UnitMediaResponse], status_code=201
)
async def add_media(
    unit_id: int,
    data: UnitMediaCreate,
    current_user: LandlordUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Register an uploaded media file for a draft unit."""
    landlord = await require_landlord(db, current_user.id)
    media = await services.add_media(db, unit_id, landlord.id, current_user.id, data)
    return BaseResponse(
        success=True,
        message="Media added successfully",
        data=UnitMediaResponse.model_validate(media),
    )


@router.post("/{unit_id}/submit", response_model=BaseResponse[UnitResponse])
async def submit_unit(
    unit_id: int,
    current_user: LandlordUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Submit a draft unit for admin review."""
    landlord = await require_landlord(db, current_user.id)
    unit = await services.submit_unit(db, unit_id, landlord.id)
    return BaseResponse(
        success=True,
        message="Unit submitted for review",
        data=UnitResponse.model_validate(unit),
    )


# ----- Admin -----


@admin_router.patch("/{unit_id}/review", response_model=BaseResponse[UnitResponse])
async def review_unit(
    unit_id: int,
    data: UnitReview,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Set approval flags and/or status."""
    unit = await services.review_unit(
        db,
        unit_id,
        structural_approved=data.structural_approved,
        operational_approved=data.operational_baseline_approved,
        status=data.status,
    )
    return BaseResponse(success=True, data=UnitResponse.model_validate(unit))


@admin_router.patch("/{unit_id}/status", response_model=BaseResponse[UnitResponse])
async def set_unit_status(
    unit_id: int,
    data: UnitStatusUpdate,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    unit = await services.set_unit_status(db, unit_id, data.status)
    return BaseResponse(success=True, data=UnitResponse.model_validate(unit))


@admin_router.patch(
    "/{unit_id}/structural-checklist",
    response_model=BaseResponse[StructuralChecklistResponse],
)
async def patch_structural_checklist(
    unit_id: int,
    data: StructuralChecklistPatch,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    checklist = await services.set_checklist(
        db, unit_id, ChecklistKind.STRUCTURAL, data
    )
    return BaseResponse(
        success=True,
        data=StructuralChecklistResponse.model_validate(checklist),
    )


@admin_router.patch(
    "/{unit_id}/operational-checklist",
    response_model=BaseResponse[OperationalChecklistResponse],
)
async def patch_operational_checklist(
    unit_id: int,
    data: OperationalChecklistPatch,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    checklist = await services.set_checklist(
        db, unit_id, ChecklistKind.OPERATIONAL, data
    )
    return BaseResponse(
        success=True,
        data=OperationalChecklistResponse.model_validate(checklist),
    )
