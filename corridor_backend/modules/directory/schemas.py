"""Directory schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

# ----- Corridor Schemas -----


class CorridorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    city_code: int = Field(..., ge=0, le=99)


class CorridorResponse(CorridorCreate):
    id: int
    created_at: datetime

    class Config:
        from_attributes = True


# ----- Profile Schemas -----


class LandlordCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class LandlordResponse(LandlordCreate):
    id: int
    user_id: int

    class Config:
        from_attributes = True


class StudentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    intake: str | None = Field(None, max_length=50)
    corridor_id: int


class StudentResponse(StudentCreate):
    id: int
    user_id: int

    class Config:
        from_attributes = True
