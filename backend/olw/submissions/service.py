"""Challenge submission and grading workflow.

Per (user, stack) pair: ``None -> PENDING -> {PASS, FAIL}``, and any
resubmission goes back to PENDING with the verdict discarded.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from olw.database.upsert import dialect_insert
from olw.exceptions import InvalidInputError, ResourceNotFoundError
from olw.stacks.models import Stack
from olw.submissions.models import Submission, SubmissionStatus
from olw.submissions.schemas import AdminSubmissionResponse, SubmissionCounts, SubmissionResponse


logger = logging.getLogger(__name__)

GRADABLE_STATUSES = (SubmissionStatus.PASS, SubmissionStatus.FAIL)


class SubmissionService:
    """Service for challenge submissions."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def submit(self, user_id: int, stack_id: int, repo_link: str) -> SubmissionResponse:
        """Create the user's submission for a stack, or overwrite it on resubmission.

        At most one row per (user, stack) ever exists; the upsert leans on the
        unique constraint so two concurrent submits cannot both insert.
        """
        if await self.session.get(Stack, stack_id) is None:
            msg = "Stack"
            raise ResourceNotFoundError(msg, stack_id)

        now = datetime.now(UTC)
        insert = dialect_insert(self.session)
        stmt = insert(Submission).values(
            user_id=user_id,
            stack_id=stack_id,
            repo_link=repo_link,
            status=SubmissionStatus.PENDING,
            feedback=None,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Submission.user_id, Submission.stack_id],
            set_={
                "repo_link": stmt.excluded.repo_link,
                "status": stmt.excluded.status,
                "feedback": None,
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(Submission.id)

        submission_id = (await self.session.execute(stmt)).scalar_one()
        await self.session.commit()

        logger.info("User %s submitted %s for stack %s", user_id, repo_link, stack_id)
        submission = await self._load(submission_id)
        return SubmissionResponse.model_validate(submission)

    async def list_for_user(self, user_id: int) -> list[SubmissionResponse]:
        """The user's submissions, newest first."""
        query = (
            select(Submission)
            .where(Submission.user_id == user_id)
            .options(selectinload(Submission.stack))
            .order_by(Submission.created_at.desc(), Submission.id.desc())
        )
        result = await self.session.execute(query)
        return [SubmissionResponse.model_validate(s) for s in result.scalars().all()]

    async def list_all(self, status: SubmissionStatus | None = None) -> list[AdminSubmissionResponse]:
        """Every submission (optionally one status), newest first."""
        query = select(Submission).options(
            selectinload(Submission.stack),
            selectinload(Submission.user),
        )
        if status is not None:
            query = query.where(Submission.status == status)
        query = query.order_by(Submission.created_at.desc(), Submission.id.desc())

        result = await self.session.execute(query)
        return [AdminSubmissionResponse.model_validate(s) for s in result.scalars().all()]

    async def get(self, submission_id: int) -> AdminSubmissionResponse:
        return AdminSubmissionResponse.model_validate(await self._load(submission_id))

    async def grade(self, submission_id: int, status: str, feedback: str | None = None) -> AdminSubmissionResponse:
        """Record a PASS/FAIL verdict; the repo link is left untouched."""
        if status not in {s.value for s in GRADABLE_STATUSES}:
            msg = "status must be 'PASS' or 'FAIL'"
            raise InvalidInputError(msg)

        submission = await self._load(submission_id)
        submission.status = SubmissionStatus(status)
        submission.feedback = feedback
        await self.session.commit()

        logger.info("Submission %s graded %s", submission_id, status)
        return AdminSubmissionResponse.model_validate(await self._load(submission_id))

    async def counts(self) -> SubmissionCounts:
        """Total submissions and a breakdown by status."""
        result = await self.session.execute(
            select(Submission.status, func.count(Submission.id)).group_by(Submission.status)
        )
        by_status = {status: count for status, count in result.all()}
        return SubmissionCounts(
            total=sum(by_status.values()),
            pending=by_status.get(SubmissionStatus.PENDING, 0),
            passed=by_status.get(SubmissionStatus.PASS, 0),
            failed=by_status.get(SubmissionStatus.FAIL, 0),
        )

    async def _load(self, submission_id: int) -> Submission:
        query = (
            select(Submission)
            .where(Submission.id == submission_id)
            .options(selectinload(Submission.stack), selectinload(Submission.user))
            .execution_options(populate_existing=True)
        )
        submission = (await self.session.execute(query)).scalar_one_or_none()
        if submission is None:
            msg = "Submission"
            raise ResourceNotFoundError(msg, submission_id)
        return submission
