"""Derived, read-only statistics over submissions, questions and users.

Timestamps are stored as UTC; "today" and streak days are calendar
days in the server's local timezone.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional

from sqlalchemy import case
from sqlmodel import Session, select, func

from codepractice.models import Question, Role, Submission, SubmissionStatus, User
from codepractice.schemas import AdminStats, UserStats


def local_day(stamp: datetime) -> date:
    # SQLite drops the offset on the way back out
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp.astimezone().date()


def local_day_bounds(day: date):
    """UTC [start, end) covering one server-local calendar day."""
    start = datetime.combine(day, time.min).astimezone(timezone.utc)
    end = datetime.combine(day + timedelta(days=1), time.min).astimezone(timezone.utc)
    return start, end


def success_rate(accepted: int, total: int) -> float:
    return accepted / total * 100 if total else 0.0


def current_streak(days: Iterable[date], today: date) -> int:
    """Consecutive days with an accepted submission, ending today or yesterday."""
    active = set(days)
    if today in active:
        day = today
    elif today - timedelta(days=1) in active:
        day = today - timedelta(days=1)
    else:
        return 0
    streak = 0
    while day in active:
        streak += 1
        day -= timedelta(days=1)
    return streak


def _accepted_count():
    return func.count(case((Submission.status == SubmissionStatus.accepted, 1)))


def get_user_stats(session: Session, user_id: int, today: Optional[date] = None) -> UserStats:
    total, accepted, avg_runtime = session.exec(
        select(func.count(Submission.id), _accepted_count(), func.avg(Submission.runtime))
        .where(Submission.user_id == user_id)
    ).one()

    accepted_stamps = session.exec(
        select(Submission.submitted_at)
        .where(Submission.user_id == user_id, Submission.status == SubmissionStatus.accepted)
    ).all()

    today = today or datetime.now().date()
    return UserStats(
        total_submissions=total or 0,
        accepted_submissions=accepted or 0,
        success_rate=success_rate(accepted or 0, total or 0),
        average_runtime=float(avg_runtime or 0),
        current_streak=current_streak((local_day(s) for s in accepted_stamps), today),
    )


def get_admin_stats(session: Session, today: Optional[date] = None) -> AdminStats:
    active_students = session.exec(
        select(func.count(User.id)).where(User.role == Role.student)
    ).one()
    total_questions = session.exec(
        select(func.count(Question.id)).where(Question.is_deleted == False)  # noqa: E712
    ).one()

    start, end = local_day_bounds(today or datetime.now().date())
    daily_submissions = session.exec(
        select(func.count(Submission.id))
        .where(Submission.submitted_at >= start, Submission.submitted_at < end)
    ).one()

    total, accepted = session.exec(
        select(func.count(Submission.id), _accepted_count())
    ).one()

    return AdminStats(
        active_students=active_students or 0,
        total_questions=total_questions or 0,
        daily_submissions=daily_submissions or 0,
        success_rate=success_rate(accepted or 0, total or 0),
    )
