"""Occupancy API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ..auth.dependencies import LandlordOrAdminUser
from ..auth.schemas import AuthenticatedUser
from ..commons import BaseResponse
from . import services
from .schemas import (
    CheckInRequest,
    CheckInResult,
    OccupancyDetail,
    OccupancyResponse,
    OccupantResponse,
)

router = APIRouter(prefix="/occupancy", tags=["Occupancy"])


def _landlord_user_id(user: AuthenticatedUser) -> int | None:
    return None if user.is_admin else user.id


def _detail(occupancy, occupants) -> OccupancyDetail:
    return OccupancyDetail(
        occupancy=OccupancyResponse.model_validate(occupancy),
        occupants=[OccupantResponse.model_validate(o) for o in occupants],
    )


@router.post("/check-in", response_model=BaseResponse[CheckInResult], status_code=201)
async def check_in(
    data: CheckInRequest,
    current_user: LandlordOrAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Check a student into a unit and issue a 12-digit occupant ID."""
    occupancy, occupant = await services.check_in(
        db,
        unit_id=data.unit_id,
        student_id=data.student_id,
        landlord_user_id=_landlord_user_id(current_user),
    )
    return BaseResponse(
        success=True,
        message="Student checked in",
        data=CheckInResult(
            occupancy_id=occupancy.id,
            public_occupant_id=occupant.public_id,
            occupancy=OccupancyResponse.model_validate(occupancy),
            occupant=OccupantResponse.model_validate(occupant),
        ),
    )


@router.post("/{occupancy_id}/check-out", response_model=BaseResponse[OccupancyDetail])
async def check_out(
    occupancy_id: int,
    current_user: LandlordOrAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    occupancy, occupants = await services.check_out(
        db, occupancy_id, landlord_user_id=_landlord_user_id(current_user)
    )
    return BaseResponse(
        success=True,
        message="Student checked out",
        data=_detail(occupancy, occupants),
    )


@router.get("/{occupancy_id}", response_model=BaseResponse[OccupancyDetail])
async def get_occupancy(
    occupancy_id: int,
    current_user: LandlordOrAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    occupancy, occupants = await services.get_occupancy(db, occupancy_id)
    return BaseResponse(success=True, data=_detail(occupancy, occupants))
