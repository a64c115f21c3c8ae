"""Reads and writes against the users, questions and submissions tables."""
from typing import List, Optional

from sqlalchemy import Integer, cast, func, update
from sqlmodel import Session, select

from codepractice.models import Question, Submission, User


# --- users ---

def get_user(session: Session, user_id: int) -> Optional[User]:
    return session.get(User, user_id)


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(select(User).where(User.email == email)).first()


def get_user_by_username(session: Session, username: str) -> Optional[User]:
    return session.exec(select(User).where(User.username == username)).first()


# --- questions ---

def list_questions(
    session: Session,
    type: Optional[str] = None,
    difficulty: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Question]:
    query = select(Question).where(Question.is_deleted == False)  # noqa: E712
    if type:
        query = query.where(Question.type == type)
    if difficulty:
        query = query.where(Question.difficulty == difficulty)
    if search and search.strip():
        query = query.where(func.lower(Question.title).contains(search.strip().lower(), autoescape=True))
    return list(session.exec(query.order_by(Question.created_at.asc(), Question.id.asc())).all())


def get_question(session: Session, question_id: int) -> Optional[Question]:
    question = session.get(Question, question_id)
    if question is None or question.is_deleted:
        return None
    return question


def increment_and_recompute_acceptance(session: Session, question_id: int, was_accepted: bool) -> None:
    """Count one more submission against a question and refresh its acceptance.

    A single UPDATE evaluated by the database against the row's current
    values; concurrent callers serialize on the row lock and never read a
    stale count. The caller owns the transaction.
    """
    accepted = Question.accepted_count + (1 if was_accepted else 0)
    total = Question.submissions_count + 1
    session.exec(
        update(Question)
        .where(Question.id == question_id)
        .values(
            submissions_count=total,
            accepted_count=accepted,
            acceptance=cast(func.round(100.0 * accepted / total), Integer),
        )
    )


# --- submissions ---

def list_submissions(
    session: Session,
    user_id: Optional[int] = None,
    question_id: Optional[int] = None,
) -> List[Submission]:
    query = select(Submission)
    if user_id is not None:
        query = query.where(Submission.user_id == user_id)
    if question_id is not None:
        query = query.where(Submission.question_id == question_id)
    return list(session.exec(query.order_by(Submission.submitted_at.desc(), Submission.id.desc())).all())


def get_submission(session: Session, submission_id: int) -> Optional[Submission]:
    return session.get(Submission, submission_id)


def create_submission(session: Session, submission: Submission) -> Submission:
    """Persist a graded submission and update its question's aggregates together."""
    session.add(submission)
    session.flush()
    increment_and_recompute_acceptance(
        session, submission.question_id, submission.status == "accepted"
    )
    session.commit()
    session.refresh(submission)
    return submission
