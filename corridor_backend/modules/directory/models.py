"""Directory models: corridors and the landlord/student profiles bound to users."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ...database import Base, IdMixin, TimestampMixin


class Corridor(IdMixin, TimestampMixin, Base):
    """Geographic catchment grouping units and student demand."""

    __tablename__ = "corridors"

    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    city_code: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<Corridor(id={self.id}, name={self.name}, city_code={self.city_code})>"


class Landlord(IdMixin, TimestampMixin, Base):
    __tablename__ = "landlords"

    user_id: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Landlord(id={self.id}, user_id={self.user_id})>"


class Student(IdMixin, TimestampMixin, Base):
    __tablename__ = "students"

    user_id: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    intake: Mapped[str | None] = mapped_column(String(50), nullable=True)
    corridor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("corridors.id"), nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, user_id={self.user_id})>"
