"""Admin CRUD for stacks, topics, videos and users."""

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from olw.admin.schemas import (
    AdminTopicResponse,
    AdminVideoResponse,
    StackCreate,
    StackUpdate,
    TopicCreate,
    TopicRecord,
    TopicUpdate,
    VideoCreate,
    VideoRecord,
    VideoUpdate,
)
from olw.database.base import Base
from olw.exceptions import ConflictError, InvalidInputError, ResourceNotFoundError
from olw.progress.models import Progress
from olw.stacks.models import Stack, Topic, Video
from olw.stacks.schemas import StackResponse, StackSummary
from olw.submissions.models import Submission
from olw.users.models import User
from olw.users.schemas import AdminUserResponse


logger = logging.getLogger(__name__)


def _apply_updates(row: Base, updates: dict[str, Any], nullable: frozenset[str] = frozenset()) -> None:
    # An explicit null only clears columns that may be empty
    for field, value in updates.items():
        if value is None and field not in nullable:
            continue
        setattr(row, field, value)


class AdminService:
    """Catalog and user management for administrators.

    Deletes rely on ``ON DELETE CASCADE``: removing a stack, topic, video or
    user also removes the rows that hang off it.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _get_or_404(self, model: type[Base], record_id: int, resource_name: str) -> Any:
        row = await self.session.get(model, record_id)
        if row is None:
            raise ResourceNotFoundError(resource_name, record_id)
        return row

    async def _delete(self, model: type[Base], record_id: int, resource_name: str) -> None:
        row = await self._get_or_404(model, record_id, resource_name)
        await self.session.delete(row)
        await self.session.commit()
        logger.info("Deleted %s %s", resource_name.lower(), record_id)

    async def _save(self, row: Base) -> None:
        await self.session.commit()
        await self.session.refresh(row)

    # ---- Stacks ----

    async def _ensure_slug_free(self, slug: str) -> None:
        existing = await self.session.execute(select(Stack.id).where(Stack.slug == slug))
        if existing.scalar_one_or_none() is not None:
            msg = "Stack with this slug already exists"
            raise ConflictError(msg)

    async def create_stack(self, data: StackCreate) -> StackResponse:
        await self._ensure_slug_free(data.slug)
        stack = Stack(**data.model_dump())
        self.session.add(stack)
        await self._save(stack)
        logger.info("Created stack %s (%s)", stack.id, stack.slug)
        return StackResponse.model_validate(stack)

    async def update_stack(self, stack_id: int, data: StackUpdate) -> StackResponse:
        stack = await self._get_or_404(Stack, stack_id, "Stack")
        updates = data.model_dump(exclude_unset=True)

        new_slug = updates.get("slug")
        if new_slug and new_slug != stack.slug:
            await self._ensure_slug_free(new_slug)

        _apply_updates(stack, updates, nullable=frozenset({"description", "thumbnail"}))
        await self._save(stack)
        return StackResponse.model_validate(stack)

    async def delete_stack(self, stack_id: int) -> None:
        await self._delete(Stack, stack_id, "Stack")

    # ---- Topics ----

    async def list_topics(self) -> list[AdminTopicResponse]:
        video_counts = (
            select(Video.topic_id, func.count(Video.id).label("video_count"))
            .group_by(Video.topic_id)
            .subquery()
        )
        query = (
            select(Topic, func.coalesce(video_counts.c.video_count, 0))
            .outerjoin(video_counts, video_counts.c.topic_id == Topic.id)
            .options(selectinload(Topic.stack))
            .order_by(Topic.stack_id, Topic.sort_order, Topic.id)
        )
        result = await self.session.execute(query)
        return [
            AdminTopicResponse(
                **TopicRecord.model_validate(topic).model_dump(),
                stack=StackSummary.model_validate(topic.stack),
                video_count=video_count,
            )
            for topic, video_count in result.all()
        ]

    async def create_topic(self, data: TopicCreate) -> TopicRecord:
        await self._get_or_404(Stack, data.stack_id, "Stack")
        topic = Topic(**data.model_dump())
        self.session.add(topic)
        await self._save(topic)
        return TopicRecord.model_validate(topic)

    async def update_topic(self, topic_id: int, data: TopicUpdate) -> TopicRecord:
        topic = await self._get_or_404(Topic, topic_id, "Topic")
        _apply_updates(topic, data.model_dump(exclude_unset=True))
        await self._save(topic)
        return TopicRecord.model_validate(topic)

    async def delete_topic(self, topic_id: int) -> None:
        await self._delete(Topic, topic_id, "Topic")

    # ---- Videos ----

    async def list_videos(self) -> list[AdminVideoResponse]:
        query = (
            select(Video)
            .options(selectinload(Video.topic).selectinload(Topic.stack))
            .order_by(Video.topic_id, Video.sort_order, Video.id)
        )
        result = await self.session.execute(query)
        return [AdminVideoResponse.model_validate(video) for video in result.scalars().all()]

    async def create_video(self, data: VideoCreate) -> VideoRecord:
        await self._get_or_404(Topic, data.topic_id, "Topic")
        video = Video(**data.model_dump())
        self.session.add(video)
        await self._save(video)
        return VideoRecord.model_validate(video)

    async def update_video(self, video_id: int, data: VideoUpdate) -> VideoRecord:
        video = await self._get_or_404(Video, video_id, "Video")
        _apply_updates(video, data.model_dump(exclude_unset=True))
        await self._save(video)
        return VideoRecord.model_validate(video)

    async def delete_video(self, video_id: int) -> None:
        await self._delete(Video, video_id, "Video")

    # ---- Users ----

    async def list_users(self) -> list[AdminUserResponse]:
        submission_counts = (
            select(Submission.user_id, func.count(Submission.id).label("n"))
            .group_by(Submission.user_id)
            .subquery()
        )
        progress_counts = (
            select(Progress.user_id, func.count(Progress.id).label("n"))
            .group_by(Progress.user_id)
            .subquery()
        )
        query = (
            select(
                User,
                func.coalesce(submission_counts.c.n, 0),
                func.coalesce(progress_counts.c.n, 0),
            )
            .outerjoin(submission_counts, submission_counts.c.user_id == User.id)
            .outerjoin(progress_counts, progress_counts.c.user_id == User.id)
            .order_by(User.created_at.desc(), User.id.desc())
        )
        result = await self.session.execute(query)
        return [
            AdminUserResponse.model_validate(user).model_copy(
                update={"submission_count": submissions, "progress_count": progress}
            )
            for user, submissions, progress in result.all()
        ]

    async def delete_user(self, user_id: int, acting_user_id: int) -> None:
        """Delete a user account; admins cannot remove themselves."""
        if user_id == acting_user_id:
            msg = "You cannot delete your own account"
            raise InvalidInputError(msg)
        await self._delete(User, user_id, "User")
