from fastapi import APIRouter, Depends, Response
from sqlmodel import Session
from typing import List, Optional
import logging

from codepractice import storage
from codepractice.auth import get_current_user, require_admin
from codepractice.db import get_session
from codepractice.errors import InvalidInput, NotFound
from codepractice.models import Difficulty, Question, QuestionType, Role, User
from codepractice.schemas import (
    QuestionCreate,
    QuestionRead,
    QuestionUpdate,
    dedupe_topics,
    validate_question_fields,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/questions", tags=["questions"])

# fields a partial update may explicitly null out
CLEARABLE_FIELDS = {"options", "correct_answer", "starter_code", "test_cases", "topics"}

# fields that only make sense on the other question type
FOREIGN_FIELDS = {
    QuestionType.mcq: {"starter_code": "starterCode", "test_cases": "testCases"},
    QuestionType.coding: {"options": "options", "correct_answer": "correctAnswer"},
}


def to_read(question: Question, viewer: User) -> QuestionRead:
    data = QuestionRead.model_validate(question)
    # students only learn the answer by submitting
    if viewer.role != Role.admin:
        data.correct_answer = None
    return data


def _get_or_404(session: Session, question_id: int) -> Question:
    question = storage.get_question(session, question_id)
    if not question:
        raise NotFound("Question not found")
    return question


@router.get("", response_model=List[QuestionRead])
def list_questions(
    type: Optional[QuestionType] = None,
    difficulty: Optional[Difficulty] = None,
    search: str = "",
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    questions = storage.list_questions(session, type=type, difficulty=difficulty, search=search)
    return [to_read(q, current_user) for q in questions]


@router.get("/{question_id}", response_model=QuestionRead)
def question_detail(
    question_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return to_read(_get_or_404(session, question_id), current_user)


@router.post("", response_model=QuestionRead, status_code=201)
def create_question(
    body: QuestionCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_admin),
):
    validate_question_fields(body.type, body.options, body.correct_answer, body.test_cases)

    question = Question(
        title=body.title,
        description=body.description,
        type=body.type,
        difficulty=body.difficulty,
        options=body.options if body.type == QuestionType.mcq else None,
        correct_answer=body.correct_answer if body.type == QuestionType.mcq else None,
        starter_code=body.starter_code if body.type == QuestionType.coding else None,
        test_cases=(
            [tc.model_dump(by_alias=True) for tc in body.test_cases]
            if body.type == QuestionType.coding else None
        ),
        topics=dedupe_topics(body.topics),
        created_by=current_user.id,
    )
    session.add(question)
    session.commit()
    session.refresh(question)
    logger.info("Question %s (%s) created by %s", question.id, question.type.value, current_user.username)
    return to_read(question, current_user)


@router.put("/{question_id}", response_model=QuestionRead)
def update_question(
    question_id: int,
    body: QuestionUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_admin),
):
    question = _get_or_404(session, question_id)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("type") is not None and changes["type"] != question.type:
        raise InvalidInput("Question type cannot be changed")
    changes.pop("type", None)
    foreign = [alias for key, alias in FOREIGN_FIELDS[question.type].items() if changes.get(key) is not None]
    if foreign:
        raise InvalidInput(f"{', '.join(foreign)} not allowed on {question.type.value} questions")
    changes = {k: v for k, v in changes.items() if v is not None or k in CLEARABLE_FIELDS}

    if "test_cases" in changes and changes["test_cases"] is not None:
        changes["test_cases"] = [tc.model_dump(by_alias=True) for tc in body.test_cases]
    if "topics" in changes:
        changes["topics"] = dedupe_topics(changes["topics"] or [])

    merged_options = changes.get("options", question.options)
    merged_answer = changes.get("correct_answer", question.correct_answer)
    merged_tests = changes.get("test_cases", question.test_cases)
    validate_question_fields(question.type, merged_options, merged_answer, merged_tests)

    for key, value in changes.items():
        setattr(question, key, value)
    session.add(question)
    session.commit()
    session.refresh(question)
    logger.info("Question %s updated by %s", question.id, current_user.username)
    return to_read(question, current_user)


@router.delete("/{question_id}", status_code=204)
def delete_question(
    question_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_admin),
):
    question = _get_or_404(session, question_id)
    # soft delete; submissions keep pointing at the row
    question.is_deleted = True
    session.add(question)
    session.commit()
    logger.info("Question %s deleted by %s", question_id, current_user.username)
    return Response(status_code=204)
