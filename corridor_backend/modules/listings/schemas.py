"""Listing schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from .models import MediaType, UnitStatus

# ----- Unit Schemas -----


class UnitCreate(BaseModel):
    corridor_id: int
    capacity: int = Field(default=1, ge=1)
    rent: int = Field(default=0, ge=0)
    distance_km: float = Field(default=0, ge=0)
    ac: bool = False
    occupancy_type: str = Field(default="unknown", min_length=1, max_length=50)


class UnitResponse(BaseModel):
    """Schema for unit response."""

    id: int
    corridor_id: int
    landlord_id: int
    capacity: int
    rent: int
    distance_km: float
    ac: bool
    occupancy_type: str
    status: UnitStatus
    structural_approved: bool
    operational_baseline_approved: bool
    trust_score: int
    audit_required: bool
    false_declaration_count: int
    created_at: datetime

    class Config:
        from_attributes = True


class UnitReview(BaseModel):
    """Admin review patch; at least one field must be set."""

    structural_approved: bool | None = None
    operational_baseline_approved: bool | None = None
    status: UnitStatus | None = None


class UnitStatusUpdate(BaseModel):
    status: UnitStatus


class UnitExplanation(BaseModel):
    """Why a unit is or is not visible to students."""

    unit_id: int
    status: UnitStatus
    structural_approved: bool
    operational_baseline_approved: bool
    trust_score: int
    trust_band: str
    active_complaints: int
    complaints_last_30_days: int
    audit_required: bool
    visible_to_students: bool
    visibility_reasons: list[str]


# ----- Checklist Schemas -----


class StructuralChecklistPut(BaseModel):
    """Full structural checklist as declared by the landlord."""

    fire_exit: bool
    wiring_safe: bool
    plumbing_safe: bool
    occupancy_compliant: bool


class StructuralChecklistPatch(BaseModel):
    fire_exit: bool | None = None
    wiring_safe: bool | None = None
    plumbing_safe: bool | None = None
    occupancy_compliant: bool | None = None


class StructuralChecklistResponse(StructuralChecklistPut):
    id: int
    unit_id: int
    approved: bool

    class Config:
        from_attributes = True


class OperationalChecklistPut(BaseModel):
    """Full operational checklist as declared by the landlord."""

    bed_available: bool
    water_available: bool
    toilets_available: bool
    ventilation_good: bool
    self_declaration: str | None = Field(None, max_length=2000)


class OperationalChecklistPatch(BaseModel):
    bed_available: bool | None = None
    water_available: bool | None = None
    toilets_available: bool | None = None
    ventilation_good: bool | None = None
    self_declaration: str | None = Field(None, max_length=2000)


class OperationalChecklistResponse(OperationalChecklistPut):
    id: int
    unit_id: int
    approved: bool

    class Config:
        from_attributes = True


# ----- Media Schemas -----


class UnitMediaCreate(BaseModel):
    """Metadata of a file already stored by the media service."""

    type: MediaType
    storage_key: str = Field(..., min_length=1, max_length=512)
    public_url: str = Field(default="", max_length=1024)
    file_name: str = Field(..., min_length=1, max_length=255)
    mime_type: str = Field(..., min_length=1, max_length=120)
    size_in_bytes: int = Field(default=0, ge=0)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            if value == "360":
                return MediaType.WALKTHROUGH_360.value
        return value


class UnitMediaResponse(UnitMediaCreate):
    id: int
    unit_id: int
    uploaded_by: int
    locked: bool
    created_at: datetime

    class Config:
        from_attributes = True
