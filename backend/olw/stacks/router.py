"""Public curriculum endpoints."""

from fastapi import APIRouter

from olw.auth import OptionalUser
from olw.core.schemas import ApiResponse, ok
from olw.database.session import DbSession

from .schemas import StackDetail, StackListItem
from .service import StackService


router = APIRouter(prefix="/stacks", tags=["stacks"])


@router.get("")
async def list_stacks(session: DbSession) -> ApiResponse[list[StackListItem]]:
    """List all stacks with topic and video counts."""
    return ok(await StackService(session).list_stacks())


@router.get("/{slug}")
async def get_stack(slug: str, session: DbSession, viewer: OptionalUser) -> ApiResponse[StackDetail]:
    """Get a stack with its topics and videos, plus the viewer's progress when signed in."""
    service = StackService(session)
    if viewer is not None:
        return ok(await service.get_stack_for_viewer(slug, viewer.id))
    return ok(await service.get_stack(slug))
