from typing import List, Optional
from datetime import datetime, timezone
from enum import Enum
from sqlalchemy import Column, DateTime, JSON
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _stamp_column(**kw) -> Column:
    return Column(DateTime(timezone=True), nullable=False, **kw)


class Role(str, Enum):
    student = "student"
    admin = "admin"


class QuestionType(str, Enum):
    mcq = "mcq"
    coding = "coding"


class Difficulty(str, Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class SubmissionStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    wrong_answer = "wrong_answer"
    time_limit_exceeded = "time_limit_exceeded"
    runtime_error = "runtime_error"
    compilation_error = "compilation_error"


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True)
    email: str = Field(unique=True, index=True)
    password_hash: str
    role: Role = Role.student
    created_at: datetime = Field(default_factory=utcnow, sa_column=_stamp_column())


class Question(SQLModel, table=True):
    __tablename__ = "questions"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str
    type: QuestionType
    difficulty: Difficulty
    options: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    correct_answer: Optional[str] = None
    starter_code: Optional[str] = None
    test_cases: Optional[List[dict]] = Field(default=None, sa_column=Column(JSON))
    topics: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    # cached aggregates, only touched by storage.increment_and_recompute_acceptance
    acceptance: int = 0
    submissions_count: int = 0
    accepted_count: int = 0
    created_by: Optional[int] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=utcnow, sa_column=_stamp_column(index=True))
    is_deleted: bool = False


class Submission(SQLModel, table=True):
    __tablename__ = "submissions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    question_id: int = Field(foreign_key="questions.id", index=True)
    code: Optional[str] = None
    answer: Optional[str] = None
    language: Optional[str] = None
    status: SubmissionStatus = SubmissionStatus.pending
    runtime: Optional[int] = None  # ms
    memory: Optional[int] = None  # MB
    score: Optional[int] = None
    test_cases_passed: int = 0
    total_test_cases: int = 0
    error_message: Optional[str] = None
    submitted_at: datetime = Field(default_factory=utcnow, sa_column=_stamp_column(index=True))
