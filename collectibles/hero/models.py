"""Hero banner settings model."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from collectibles.db.base import Base, utc_now, uuid_pk


class HeroSettings(Base):
    """The single row of home page hero text."""

    __tablename__ = "hero_settings"

    id: Mapped[str] = uuid_pk()
    heading_line1: Mapped[str] = mapped_column(String(255), nullable=False)
    heading_line2: Mapped[str] = mapped_column(String(255), nullable=False)
    paragraph: Mapped[str] = mapped_column(Text, nullable=False)
    # Last editor
    user_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<HeroSettings(id={self.id}, heading_line1={self.heading_line1})>"
