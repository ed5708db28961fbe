"""Student progress endpoints."""

from fastapi import APIRouter

from olw.auth import CurrentAuth
from olw.core.schemas import ApiResponse, ok

from .schemas import DashboardResponse, ProgressResponse, ProgressToggle
from .service import ProgressService


router = APIRouter(tags=["progress"])


@router.get("/dashboard")
async def get_dashboard(auth: CurrentAuth) -> ApiResponse[DashboardResponse]:
    """Get the signed-in user's dashboard."""
    return ok(await ProgressService(auth.session).dashboard(auth.user_id))


@router.post("/progress")
async def toggle_progress(data: ProgressToggle, auth: CurrentAuth) -> ApiResponse[ProgressResponse]:
    """Mark a video as completed or not completed."""
    progress = await ProgressService(auth.session).toggle(auth.user_id, data.video_id, data.is_completed)
    message = "Video marked as completed" if progress.is_completed else "Video marked as uncompleted"
    return ok(progress, message)
