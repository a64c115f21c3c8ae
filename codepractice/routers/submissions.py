from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from typing import List, Optional
import logging

from codepractice import storage
from codepractice.auth import get_current_user
from codepractice.db import get_session
from codepractice.errors import Forbidden, NotFound
from codepractice.judge.grading import grade
from codepractice.judge.runner import Executor, get_executor
from codepractice.models import Role, User
from codepractice.schemas import SubmissionCreate, SubmissionRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/submissions", tags=["submissions"])


@router.get("", response_model=List[SubmissionRead])
def list_submissions(
    question_id: Optional[int] = Query(default=None, alias="questionId"),
    user_id: Optional[int] = Query(default=None, alias="userId"),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    # admins may look at anyone's history, everyone else sees their own
    if user_id is not None and user_id != current_user.id and current_user.role != Role.admin:
        raise Forbidden("Cannot view other users' submissions")
    owner = user_id if user_id is not None else current_user.id
    return storage.list_submissions(session, user_id=owner, question_id=question_id)


@router.get("/{submission_id}", response_model=SubmissionRead)
def submission_detail(
    submission_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    submission = storage.get_submission(session, submission_id)
    # other users' submissions look the same as missing ones
    if not submission or (submission.user_id != current_user.id and current_user.role != Role.admin):
        raise NotFound("Submission not found")
    return submission


@router.post("", response_model=SubmissionRead, status_code=201)
def submit(
    body: SubmissionCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    executor: Executor = Depends(get_executor),
):
    question = storage.get_question(session, body.question_id)
    if not question:
        raise NotFound("Question not found")

    submission = grade(question, body, current_user.id, executor)
    submission = storage.create_submission(session, submission)
    logger.info(
        "Submission %s by %s on question %s: %s (%s/%s)",
        submission.id, current_user.username, question.id, submission.status.value,
        submission.test_cases_passed, submission.total_test_cases,
    )
    return submission
