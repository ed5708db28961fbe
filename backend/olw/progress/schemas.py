"""Schemas for progress API."""

from datetime import datetime

from pydantic import Field

from olw.core.schemas import MAX_RECORD_ID, CamelModel
from olw.submissions.schemas import SubmissionResponse


class ProgressToggle(CamelModel):
    """Schema for marking a video complete or incomplete."""

    video_id: int = Field(..., gt=0, le=MAX_RECORD_ID)
    is_completed: bool = True


class ProgressResponse(CamelModel):
    id: int
    user_id: int
    video_id: int
    is_completed: bool
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class DashboardOverview(CamelModel):
    total_videos: int
    total_completed: int
    overall_progress: int


class DashboardStack(CamelModel):
    """Per-stack completion for the dashboard."""

    id: int
    slug: str
    title: str
    thumbnail: str | None = None
    total_videos: int
    completed_videos: int
    progress_percent: int


class DashboardResponse(CamelModel):
    overview: DashboardOverview
    stacks: list[DashboardStack]
    submissions: list[SubmissionResponse]
    completed_video_ids: list[int]
