"""Category and item SQLAlchemy models (the remote store rows)."""

from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from collectibles.db.base import Base, StringList, TimestampMixin, uuid_pk


class Category(TimestampMixin, Base):
    """A named grouping node, optionally nested under a parent category."""

    __tablename__ = "categories"

    id: Mapped[str] = uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    cloudflare_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # No foreign key: deleting a parent leaves its children in place
    parent_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        nullable=True,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name})>"


class Item(TimestampMixin, Base):
    """A collectible belonging to exactly one category."""

    __tablename__ = "items"

    id: Mapped[str] = uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stock_status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="In Stock",
    )
    rating: Mapped[str | None] = mapped_column(String(64), nullable=True)
    valuation: Mapped[float | None] = mapped_column(Float, nullable=True)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    cloudflare_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    images: Mapped[list[str] | None] = mapped_column(StringList, nullable=True)
    cloudflare_ids: Mapped[list[str] | None] = mapped_column(StringList, nullable=True)
    manufacturer: Mapped[str | None] = mapped_column(String(255), nullable=True)
    year_manufactured: Mapped[int | None] = mapped_column(Integer, nullable=True)
    afa_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    afa_grade: Mapped[str | None] = mapped_column(String(16), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    bought_for: Mapped[float | None] = mapped_column(Float, nullable=True)
    variations: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, name={self.name})>"
