"""Schemas for admin catalog management."""

from datetime import datetime

from pydantic import ConfigDict, Field

from olw.core.schemas import MAX_RECORD_ID, CamelModel
from olw.stacks.schemas import StackSummary


SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class StackCreate(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    slug: str = Field(..., min_length=1, max_length=120, pattern=SLUG_PATTERN)
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    thumbnail: str | None = Field(None, max_length=1024)
    sort_order: int = 0


class StackUpdate(CamelModel):
    """Partial update; only fields present in the body are applied."""

    model_config = ConfigDict(str_strip_whitespace=True)

    slug: str | None = Field(None, min_length=1, max_length=120, pattern=SLUG_PATTERN)
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    thumbnail: str | None = Field(None, max_length=1024)
    sort_order: int | None = None


class TopicCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    stack_id: int = Field(..., gt=0, le=MAX_RECORD_ID)
    sort_order: int = 0


class TopicUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    sort_order: int | None = None


class TopicRecord(CamelModel):
    id: int
    title: str
    sort_order: int
    stack_id: int
    created_at: datetime
    updated_at: datetime


class AdminTopicResponse(TopicRecord):
    stack: StackSummary
    video_count: int = 0


class VideoCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=500)
    youtube_id: str = Field(..., min_length=1, max_length=64)
    topic_id: int = Field(..., gt=0, le=MAX_RECORD_ID)
    duration: int = Field(0, ge=0, description="Duration in seconds")
    sort_order: int = 0


class VideoUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=500)
    youtube_id: str | None = Field(None, min_length=1, max_length=64)
    duration: int | None = Field(None, ge=0)
    sort_order: int | None = None


class VideoRecord(CamelModel):
    id: int
    title: str
    youtube_id: str
    duration: int
    sort_order: int
    topic_id: int
    created_at: datetime
    updated_at: datetime


class TopicSummary(CamelModel):
    id: int
    title: str
    stack: StackSummary


class AdminVideoResponse(VideoRecord):
    topic: TopicSummary
