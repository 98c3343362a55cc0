"""Directory API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ..auth.dependencies import AdminUser, CurrentUser, LandlordUser, StudentUser
from ..commons import BaseResponse
from . import crud, services
from .schemas import (
    CorridorCreate,
    CorridorResponse,
    LandlordCreate,
    LandlordResponse,
    StudentCreate,
    StudentResponse,
)

router = APIRouter(prefix="/corridors", tags=["Corridors"])
profiles_router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.get("", response_model=BaseResponse[list[CorridorResponse]])
async def list_corridors(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get all corridors."""
    corridors = await crud.get_all_corridors(db)
    return BaseResponse(
        success=True,
        data=[CorridorResponse.model_validate(c) for c in corridors],
    )


@router.post("", response_model=BaseResponse[CorridorResponse])
async def create_corridor(
    data: CorridorCreate,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a corridor (admin only)."""
    corridor = await services.create_corridor(db, data)
    return BaseResponse(
        success=True,
        message="Corridor created successfully",
        data=CorridorResponse.model_validate(corridor),
    )


@profiles_router.post("/landlord", response_model=BaseResponse[LandlordResponse])
async def create_landlord_profile(
    data: LandlordCreate,
    current_user: LandlordUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    landlord = await services.create_landlord_profile(db, current_user.id, data)
    return BaseResponse(
        success=True,
        message="Landlord profile created successfully",
        data=LandlordResponse.model_validate(landlord),
    )


@profiles_router.post("/student", response_model=BaseResponse[StudentResponse])
async def create_student_profile(
    data: StudentCreate,
    current_user: StudentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    student = await services.create_student_profile(db, current_user.id, data)
    return BaseResponse(
        success=True,
        message="Student profile created successfully",
        data=StudentResponse.model_validate(student),
    )
