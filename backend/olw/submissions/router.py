"""Student challenge submission endpoints."""

from fastapi import APIRouter, status

from olw.auth import CurrentAuth
from olw.core.schemas import ApiResponse, created, ok

from .schemas import SubmissionCreate, SubmissionResponse
from .service import SubmissionService


router = APIRouter(prefix="/submissions", tags=["submissions"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_challenge(data: SubmissionCreate, auth: CurrentAuth) -> ApiResponse[SubmissionResponse]:
    """Submit (or resubmit) the challenge repository for a stack."""
    submission = await SubmissionService(auth.session).submit(auth.user_id, data.stack_id, str(data.repo_link))
    return created(submission, "Challenge submitted successfully")


@router.get("")
async def list_my_submissions(auth: CurrentAuth) -> ApiResponse[list[SubmissionResponse]]:
    """List the signed-in user's submissions, newest first."""
    return ok(await SubmissionService(auth.session).list_for_user(auth.user_id))
