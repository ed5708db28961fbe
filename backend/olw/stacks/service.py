"""Catalog read model: stack listings and nested stack detail."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from olw.core.progress_calculator import calculate_percent
from olw.exceptions import ResourceNotFoundError
from olw.progress.models import Progress
from olw.stacks.models import Stack, Topic, Video
from olw.stacks.schemas import StackDetail, StackListItem, StackProgress, TopicResponse, VideoResponse


logger = logging.getLogger(__name__)


class StackService:
    """Service for reading the curriculum catalog."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_stacks(self) -> list[StackListItem]:
        """All stacks by sort order, each with its topic and video counts."""
        topic_counts = (
            select(Topic.stack_id, func.count(Topic.id).label("topic_count"))
            .group_by(Topic.stack_id)
            .subquery()
        )
        video_counts = (
            select(Topic.stack_id, func.count(Video.id).label("video_count"))
            .join(Video, Video.topic_id == Topic.id)
            .group_by(Topic.stack_id)
            .subquery()
        )
        query = (
            select(
                Stack,
                func.coalesce(topic_counts.c.topic_count, 0),
                func.coalesce(video_counts.c.video_count, 0),
            )
            .outerjoin(topic_counts, topic_counts.c.stack_id == Stack.id)
            .outerjoin(video_counts, video_counts.c.stack_id == Stack.id)
            .order_by(Stack.sort_order, Stack.id)
        )
        result = await self.session.execute(query)

        return [
            StackListItem.model_validate(stack).model_copy(
                update={"topic_count": topic_count, "video_count": video_count}
            )
            for stack, topic_count, video_count in result.all()
        ]

    async def get_stack_model(self, slug: str) -> Stack:
        query = (
            select(Stack)
            .where(Stack.slug == slug)
            .options(selectinload(Stack.topics).selectinload(Topic.videos))
        )
        stack = (await self.session.execute(query)).scalar_one_or_none()
        if stack is None:
            msg = "Stack"
            raise ResourceNotFoundError(msg, slug)
        return stack

    async def get_stack(self, slug: str) -> StackDetail:
        """One stack with nested topics/videos plus video and duration totals."""
        stack = await self.get_stack_model(slug)
        return self._build_detail(stack)

    async def get_stack_for_viewer(self, slug: str, user_id: int) -> StackDetail:
        """Stack detail annotated with the viewer's completion marks."""
        stack = await self.get_stack_model(slug)
        completed_ids = await self._completed_video_ids(stack.id, user_id)
        return self._build_detail(stack, completed_ids)

    async def _completed_video_ids(self, stack_id: int, user_id: int) -> set[int]:
        query = (
            select(Progress.video_id)
            .join(Video, Video.id == Progress.video_id)
            .join(Topic, Topic.id == Video.topic_id)
            .where(
                Topic.stack_id == stack_id,
                Progress.user_id == user_id,
                Progress.is_completed.is_(True),
            )
        )
        result = await self.session.execute(query)
        return set(result.scalars().all())

    @staticmethod
    def _build_detail(stack: Stack, completed_ids: set[int] | None = None) -> StackDetail:
        topics = []
        total_videos = 0
        total_duration = 0

        for topic in stack.topics:
            videos = []
            for video in topic.videos:
                total_videos += 1
                total_duration += video.duration
                item = VideoResponse.model_validate(video)
                if completed_ids is not None:
                    item.is_completed = video.id in completed_ids
                videos.append(item)
            topics.append(
                TopicResponse(
                    id=topic.id,
                    title=topic.title,
                    sort_order=topic.sort_order,
                    stack_id=topic.stack_id,
                    videos=videos,
                )
            )

        detail = StackDetail(
            id=stack.id,
            slug=stack.slug,
            title=stack.title,
            description=stack.description,
            thumbnail=stack.thumbnail,
            sort_order=stack.sort_order,
            created_at=stack.created_at,
            updated_at=stack.updated_at,
            topics=topics,
            total_videos=total_videos,
            total_duration_seconds=total_duration,
        )

        if completed_ids is not None:
            completed = len(completed_ids)
            detail.progress = StackProgress(
                completed=completed,
                total=total_videos,
                percent=calculate_percent(completed, total_videos),
            )
        return detail
