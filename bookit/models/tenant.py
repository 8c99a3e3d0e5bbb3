"""Tenant model: the configuration slice the checkout engine reads."""

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from bookit.database import Base, TimestampMixin


class Tenant(TimestampMixin, Base):
    """An organisation operating its own set of bookables."""

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    mail: Mapped[str | None] = mapped_column(String(255), nullable=True)
    max_booking_advance_in_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    active_locker_systems: Mapped[list] = mapped_column(JSON, default=list)

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id!r}, name={self.name!r})>"
