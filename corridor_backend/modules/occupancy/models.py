"""Occupancy models: check-in records and the occupant IDs issued with them."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ...core.utils import utc_now
from ...database import Base, IdMixin, TimestampMixin


class Occupancy(IdMixin, TimestampMixin, Base):
    """A student's stay in a unit; active while ``end_date`` is null."""

    __tablename__ = "occupancies"

    unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id"), nullable=False, index=True
    )
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False, index=True
    )
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    # Equals student_id while active, null once checked out
    active_student_id: Mapped[int | None] = mapped_column(
        Integer, unique=True, nullable=True
    )

    @property
    def is_active(self) -> bool:
        return self.end_date is None

    def __repr__(self) -> str:
        return (
            f"<Occupancy(id={self.id}, unit_id={self.unit_id}, "
            f"student_id={self.student_id})>"
        )


class Occupant(IdMixin, TimestampMixin, Base):
    """Public occupant ID issued for an occupancy."""

    __tablename__ = "occupants"

    public_id: Mapped[str] = mapped_column(String(12), nullable=False, index=True)
    # Equals public_id while active, null once retired
    active_public_id: Mapped[str | None] = mapped_column(
        String(12), unique=True, nullable=True
    )

    city_code: Mapped[int] = mapped_column(Integer, nullable=False)
    corridor_code: Mapped[int] = mapped_column(Integer, nullable=False)
    hostel_code: Mapped[int] = mapped_column(Integer, nullable=False)
    room_number: Mapped[int] = mapped_column(Integer, nullable=False)
    occupant_index: Mapped[int] = mapped_column(Integer, nullable=False)

    unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id"), nullable=False, index=True
    )
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False, index=True
    )
    occupancy_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("occupancies.id"), nullable=False, index=True
    )
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Occupant(id={self.id}, public_id={self.public_id}, active={self.active})>"
