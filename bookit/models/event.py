"""Event model: only the attendee limit matters to checkout."""

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bookit.database import Base, StorageKeyMixin, TimestampMixin


class Event(StorageKeyMixin, TimestampMixin, Base):
    """An event whose tickets are sold as ``ticket`` bookables."""

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(64), nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    max_attendees: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (UniqueConstraint("tenant_id", "id", name="uq_events_tenant_id"),)

    def __repr__(self) -> str:
        return f"<Event(id={self.id!r}, name={self.name!r}, max_attendees={self.max_attendees})>"
