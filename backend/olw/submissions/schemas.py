from datetime import datetime
from typing import Annotated

from pydantic import AnyHttpUrl, Field, UrlConstraints

from olw.core.schemas import MAX_RECORD_ID, CamelModel
from olw.stacks.schemas import StackSummary
from olw.submissions.models import SubmissionStatus
from olw.users.schemas import UserSummary


class SubmissionCreate(CamelModel):
    """Schema for submitting (or resubmitting) a challenge."""

    stack_id: int = Field(..., gt=0, le=MAX_RECORD_ID)
    repo_link: Annotated[AnyHttpUrl, UrlConstraints(max_length=2048)]


class GradeRequest(CamelModel):
    """Schema for grading a submission.

    ``status`` is checked by the service so that an unknown value is a
    business-rule failure rather than a schema failure.
    """

    status: str = Field(..., min_length=1)
    feedback: str | None = None


class SubmissionResponse(CamelModel):
    id: int
    user_id: int
    stack_id: int
    repo_link: str
    status: SubmissionStatus
    feedback: str | None = None
    created_at: datetime
    updated_at: datetime
    stack: StackSummary


class AdminSubmissionResponse(SubmissionResponse):
    user: UserSummary


class SubmissionCounts(CamelModel):
    total: int = 0
    pending: int = 0
    passed: int = 0
    failed: int = 0


class AdminSubmissionList(CamelModel):
    submissions: list[AdminSubmissionResponse]
    counts: SubmissionCounts
