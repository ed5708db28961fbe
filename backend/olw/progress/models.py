"""Database models for video completion tracking."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from olw.database.base import Base


if TYPE_CHECKING:
    from olw.stacks.models import Video
    from olw.users.models import User


__all__ = ["Progress"]


class Progress(Base):
    """One user's completion mark on one video."""

    __tablename__ = "progress"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_progress_user_video"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    video_id: Mapped[int] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    user: Mapped[User] = relationship("User", back_populates="progress")
    video: Mapped[Video] = relationship("Video", back_populates="progress")

    def __repr__(self) -> str:
        """Return string representation of the progress."""
        return f"<Progress(id={self.id}, user_id={self.user_id}, video_id={self.video_id}, completed={self.is_completed})>"
