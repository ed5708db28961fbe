"""Admin endpoints. Every route requires an ADMIN bearer token."""

import logging
from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from olw.auth import AdminAuth
from olw.core.schemas import MAX_RECORD_ID, ApiResponse, created, ok
from olw.stacks.schemas import StackListItem, StackResponse
from olw.stacks.service import StackService
from olw.submissions.models import SubmissionStatus
from olw.submissions.schemas import AdminSubmissionList, AdminSubmissionResponse, GradeRequest
from olw.submissions.service import SubmissionService
from olw.users.schemas import AdminUserResponse

from .schemas import (
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
from .service import AdminService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

RecordId = Annotated[int, Path(gt=0, le=MAX_RECORD_ID)]


# ---- Stacks ----


@router.get("/stacks")
async def list_stacks(auth: AdminAuth) -> ApiResponse[list[StackListItem]]:
    return ok(await StackService(auth.session).list_stacks())


@router.post("/stacks", status_code=status.HTTP_201_CREATED)
async def create_stack(data: StackCreate, auth: AdminAuth) -> ApiResponse[StackResponse]:
    stack = await AdminService(auth.session).create_stack(data)
    return created(stack, "Stack created successfully")


@router.put("/stacks/{stack_id}")
async def update_stack(stack_id: RecordId, data: StackUpdate, auth: AdminAuth) -> ApiResponse[StackResponse]:
    stack = await AdminService(auth.session).update_stack(stack_id, data)
    return ok(stack, "Stack updated successfully")


@router.delete("/stacks/{stack_id}")
async def delete_stack(stack_id: RecordId, auth: AdminAuth) -> ApiResponse[None]:
    await AdminService(auth.session).delete_stack(stack_id)
    return ok(None, "Stack deleted successfully")


# ---- Topics ----


@router.get("/topics")
async def list_topics(auth: AdminAuth) -> ApiResponse[list[AdminTopicResponse]]:
    return ok(await AdminService(auth.session).list_topics())


@router.post("/topics", status_code=status.HTTP_201_CREATED)
async def create_topic(data: TopicCreate, auth: AdminAuth) -> ApiResponse[TopicRecord]:
    topic = await AdminService(auth.session).create_topic(data)
    return created(topic, "Topic created successfully")


@router.put("/topics/{topic_id}")
async def update_topic(topic_id: RecordId, data: TopicUpdate, auth: AdminAuth) -> ApiResponse[TopicRecord]:
    topic = await AdminService(auth.session).update_topic(topic_id, data)
    return ok(topic, "Topic updated successfully")


@router.delete("/topics/{topic_id}")
async def delete_topic(topic_id: RecordId, auth: AdminAuth) -> ApiResponse[None]:
    await AdminService(auth.session).delete_topic(topic_id)
    return ok(None, "Topic deleted successfully")


# ---- Videos ----


@router.get("/videos")
async def list_videos(auth: AdminAuth) -> ApiResponse[list[AdminVideoResponse]]:
    return ok(await AdminService(auth.session).list_videos())


@router.post("/videos", status_code=status.HTTP_201_CREATED)
async def create_video(data: VideoCreate, auth: AdminAuth) -> ApiResponse[VideoRecord]:
    video = await AdminService(auth.session).create_video(data)
    return created(video, "Video created successfully")


@router.put("/videos/{video_id}")
async def update_video(video_id: RecordId, data: VideoUpdate, auth: AdminAuth) -> ApiResponse[VideoRecord]:
    video = await AdminService(auth.session).update_video(video_id, data)
    return ok(video, "Video updated successfully")


@router.delete("/videos/{video_id}")
async def delete_video(video_id: RecordId, auth: AdminAuth) -> ApiResponse[None]:
    await AdminService(auth.session).delete_video(video_id)
    return ok(None, "Video deleted successfully")


# ---- Submissions ----


@router.get("/submissions")
async def list_submissions(
    auth: AdminAuth,
    status_filter: Annotated[SubmissionStatus | None, Query(alias="status")] = None,
) -> ApiResponse[AdminSubmissionList]:
    """All submissions (optionally filtered by status) plus counts by status."""
    service = SubmissionService(auth.session)
    return ok(
        AdminSubmissionList(
            submissions=await service.list_all(status_filter),
            counts=await service.counts(),
        )
    )


@router.get("/submissions/{submission_id}")
async def get_submission(submission_id: RecordId, auth: AdminAuth) -> ApiResponse[AdminSubmissionResponse]:
    return ok(await SubmissionService(auth.session).get(submission_id))


@router.put("/submissions/{submission_id}")
async def grade_submission(
    submission_id: RecordId,
    data: GradeRequest,
    auth: AdminAuth,
) -> ApiResponse[AdminSubmissionResponse]:
    """Grade a submission PASS or FAIL with optional feedback."""
    submission = await SubmissionService(auth.session).grade(submission_id, data.status, data.feedback)
    logger.info("Admin %s graded submission %s as %s", auth.user_id, submission_id, data.status)
    return ok(submission, f"Submission marked as {data.status}")


# ---- Users ----


@router.get("/users")
async def list_users(auth: AdminAuth) -> ApiResponse[list[AdminUserResponse]]:
    return ok(await AdminService(auth.session).list_users())


@router.delete("/users/{user_id}")
async def delete_user(user_id: RecordId, auth: AdminAuth) -> ApiResponse[None]:
    await AdminService(auth.session).delete_user(user_id, acting_user_id=auth.user_id)
    return ok(None, "User deleted successfully")
