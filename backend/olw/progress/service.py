"""Business logic for progress tracking."""

import logging
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from olw.core.progress_calculator import calculate_percent
from olw.exceptions import ResourceNotFoundError
from olw.progress.models import Progress
from olw.progress.queries import build_progress_upsert
from olw.progress.schemas import DashboardOverview, DashboardResponse, DashboardStack, ProgressResponse
from olw.stacks.models import Stack, Topic, Video
from olw.submissions.service import SubmissionService


logger = logging.getLogger(__name__)


class ProgressService:
    """Service for video completion marks and the student dashboard."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize progress service."""
        self.session = session

    async def toggle(self, user_id: int, video_id: int, is_completed: bool = True) -> ProgressResponse:
        """Set one user's completion mark on one video."""
        if await self.session.get(Video, video_id) is None:
            msg = "Video"
            raise ResourceNotFoundError(msg, video_id)

        stmt = build_progress_upsert(
            self.session,
            user_id=user_id,
            video_id=video_id,
            is_completed=is_completed,
            now=datetime.now(UTC),
        )
        result = await self.session.execute(stmt, execution_options={"populate_existing": True})
        progress = result.scalar_one()
        await self.session.commit()

        logger.info("User %s marked video %s completed=%s", user_id, video_id, is_completed)
        return ProgressResponse.model_validate(progress)

    async def get_completed_ids(self, user_id: int) -> list[int]:
        result = await self.session.execute(
            select(Progress.video_id)
            .where(Progress.user_id == user_id, Progress.is_completed.is_(True))
            .order_by(Progress.video_id)
        )
        return list(result.scalars().all())

    async def dashboard(self, user_id: int) -> DashboardResponse:
        """Per-stack and overall completion, plus the user's submissions."""
        total_counts = (
            select(Topic.stack_id, func.count(Video.id).label("total"))
            .join(Video, Video.topic_id == Topic.id)
            .group_by(Topic.stack_id)
            .subquery()
        )
        completed_counts = (
            select(Topic.stack_id, func.count(Progress.id).label("completed"))
            .join(Video, Video.topic_id == Topic.id)
            .join(Progress, Progress.video_id == Video.id)
            .where(Progress.user_id == user_id, Progress.is_completed.is_(True))
            .group_by(Topic.stack_id)
            .subquery()
        )
        query = (
            select(
                Stack,
                func.coalesce(total_counts.c.total, 0),
                func.coalesce(completed_counts.c.completed, 0),
            )
            .outerjoin(total_counts, total_counts.c.stack_id == Stack.id)
            .outerjoin(completed_counts, completed_counts.c.stack_id == Stack.id)
            .order_by(Stack.sort_order, Stack.id)
        )
        rows = (await self.session.execute(query)).all()

        stacks = [
            DashboardStack(
                id=stack.id,
                slug=stack.slug,
                title=stack.title,
                thumbnail=stack.thumbnail,
                total_videos=total,
                completed_videos=completed,
                progress_percent=calculate_percent(completed, total),
            )
            for stack, total, completed in rows
        ]

        total_videos = sum(s.total_videos for s in stacks)
        total_completed = sum(s.completed_videos for s in stacks)

        return DashboardResponse(
            overview=DashboardOverview(
                total_videos=total_videos,
                total_completed=total_completed,
                overall_progress=calculate_percent(total_completed, total_videos),
            ),
            stacks=stacks,
            submissions=await SubmissionService(self.session).list_for_user(user_id),
            completed_video_ids=await self.get_completed_ids(user_id),
        )
