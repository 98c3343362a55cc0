"""Pydantic schemas for the occupancy module."""

from datetime import datetime

from pydantic import BaseModel, Field


class CheckInRequest(BaseModel):
    unit_id: int = Field(..., gt=0)
    student_id: int = Field(..., gt=0)


class OccupantResponse(BaseModel):
    id: int
    public_id: str
    city_code: int
    corridor_code: int
    hostel_code: int
    room_number: int
    occupant_index: int
    unit_id: int
    student_id: int
    occupancy_id: int
    active: bool

    class Config:
        from_attributes = True


class OccupancyResponse(BaseModel):
    id: int
    unit_id: int
    student_id: int
    start_date: datetime
    end_date: datetime | None = None

    class Config:
        from_attributes = True


class CheckInResult(BaseModel):
    occupancy_id: int
    public_occupant_id: str
    occupancy: OccupancyResponse
    occupant: OccupantResponse


class OccupancyDetail(BaseModel):
    occupancy: OccupancyResponse
    occupants: list[OccupantResponse]
