"""SQLAlchemy model for persisted learned mappings."""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class LearnedMappingRow(Base):
    """A raw label confirmed by a user as referring to one master record."""

    __tablename__ = "learned_mappings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Namespace - one per sales channel (amazon, rakuten, ...)
    channel: Mapped[str] = mapped_column(String(50), nullable=False)

    # Exact label as it appeared in the source document (not normalized)
    raw_label: Mapped[str] = mapped_column(Text, nullable=False)

    # Master record identifier, stored as text so any id type round-trips
    master_id: Mapped[str] = mapped_column(String(100), nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_learned_channel_label", "channel", "raw_label", unique=True),
        Index("idx_learned_master", "master_id"),
    )

    def __repr__(self) -> str:
        return f"<LearnedMappingRow {self.channel} {self.raw_label!r} -> {self.master_id}>"
