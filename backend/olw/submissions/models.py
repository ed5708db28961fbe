"""Database models for challenge submissions."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from olw.database.base import Base


if TYPE_CHECKING:
    from olw.stacks.models import Stack
    from olw.users.models import User


__all__ = ["Submission", "SubmissionStatus"]


class SubmissionStatus(str, Enum):
    """Grading lifecycle of a submission."""

    PENDING = "PENDING"
    PASS = "PASS"  # noqa: S105
    FAIL = "FAIL"


class Submission(Base):
    """A student's challenge repository link for one stack."""

    __tablename__ = "submissions"
    __table_args__ = (
        UniqueConstraint("user_id", "stack_id", name="uq_submission_user_stack"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    stack_id: Mapped[int] = mapped_column(
        ForeignKey("stacks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    repo_link: Mapped[str] = mapped_column(String(2048), nullable=False)
    status: Mapped[SubmissionStatus] = mapped_column(
        SAEnum(SubmissionStatus, name="submission_status", native_enum=False, length=20),
        nullable=False,
        default=SubmissionStatus.PENDING,
        index=True,
    )
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    user: Mapped[User] = relationship("User", back_populates="submissions")
    stack: Mapped[Stack] = relationship("Stack", back_populates="submissions")
