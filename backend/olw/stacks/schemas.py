from datetime import datetime
from typing import Any

from pydantic import SerializerFunctionWrapHandler, model_serializer

from olw.core.schemas import CamelModel


def _drop_none_keys(data: dict[str, Any], *keys: str) -> dict[str, Any]:
    # Viewer-only fields are omitted, not null, for anonymous readers
    for key in keys:
        if key in data and data[key] is None:
            del data[key]
    return data


class StackSummary(CamelModel):
    """Compact stack reference embedded in other resources."""

    id: int
    title: str
    slug: str


class StackResponse(CamelModel):
    """Stack columns without nested content."""

    id: int
    slug: str
    title: str
    description: str | None = None
    thumbnail: str | None = None
    sort_order: int
    created_at: datetime
    updated_at: datetime


class StackListItem(StackResponse):
    """Stack card in the catalog listing."""

    topic_count: int = 0
    video_count: int = 0


class VideoResponse(CamelModel):
    id: int
    title: str
    youtube_id: str
    duration: int
    sort_order: int
    topic_id: int
    is_completed: bool | None = None

    @model_serializer(mode="wrap")
    def _serialize(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return _drop_none_keys(handler(self), "is_completed", "isCompleted")


class TopicResponse(CamelModel):
    id: int
    title: str
    sort_order: int
    stack_id: int
    videos: list[VideoResponse] = []


class StackProgress(CamelModel):
    completed: int
    total: int
    percent: int


class StackDetail(StackResponse):
    """Stack with nested ordered topics and videos.

    ``progress`` and ``videos[].is_completed`` are only filled for a signed-in viewer.
    """

    topics: list[TopicResponse] = []
    total_videos: int
    total_duration_seconds: int
    progress: StackProgress | None = None

    @model_serializer(mode="wrap")
    def _serialize(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return _drop_none_keys(handler(self), "progress")
