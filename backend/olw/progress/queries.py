"""Statements for progress tracking."""

from datetime import datetime

from sqlalchemy import and_, case
from sqlalchemy.ext.asyncio import AsyncSession

from olw.database.upsert import dialect_insert
from olw.progress.models import Progress


def build_progress_upsert(
    session: AsyncSession,
    *,
    user_id: int,
    video_id: int,
    is_completed: bool,
    now: datetime,
):
    """Single-statement upsert of the (user, video) progress row.

    ``completed_at`` is stamped when completing and cleared when un-completing,
    so repeating the same call leaves the same stored state.
    """
    completed_at = now if is_completed else None
    insert = dialect_insert(session)
    stmt = insert(Progress).values(
        user_id=user_id,
        video_id=video_id,
        is_completed=is_completed,
        completed_at=completed_at,
        created_at=now,
        updated_at=now,
    )
    return stmt.on_conflict_do_update(
        index_elements=[Progress.user_id, Progress.video_id],
        set_={
            "is_completed": stmt.excluded.is_completed,
            # Re-completing keeps the original completion time
            "completed_at": case(
                (and_(Progress.is_completed.is_(True), stmt.excluded.is_completed.is_(True)), Progress.completed_at),
                else_=stmt.excluded.completed_at,
            ),
            "updated_at": stmt.excluded.updated_at,
        },
    ).returning(Progress)
