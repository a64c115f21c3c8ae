"""Request and response bodies. Wire names are camelCase."""
from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from codepractice.errors import InvalidInput
from codepractice.models import Difficulty, QuestionType, Role, SubmissionStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# --- auth ---

class RegisterRequest(CamelModel):
    username: str = Field(min_length=1, max_length=64)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+$", max_length=255)
    password: str = Field(min_length=1)


class LoginRequest(CamelModel):
    email: str
    password: str


class UserPublic(CamelModel):
    id: int
    username: str
    email: str
    role: Role
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    token: str
    user: UserPublic


# --- questions ---

class TestCase(CamelModel):
    input: str
    expected_output: str


class QuestionCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    type: QuestionType
    difficulty: Difficulty
    options: Optional[List[str]] = None
    correct_answer: Optional[str] = None
    starter_code: Optional[str] = None
    test_cases: Optional[List[TestCase]] = None
    topics: List[str] = Field(default_factory=list)


class QuestionUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    type: Optional[QuestionType] = None
    difficulty: Optional[Difficulty] = None
    options: Optional[List[str]] = None
    correct_answer: Optional[str] = None
    starter_code: Optional[str] = None
    test_cases: Optional[List[TestCase]] = None
    topics: Optional[List[str]] = None


class QuestionRead(CamelModel):
    id: int
    title: str
    description: str
    type: QuestionType
    difficulty: Difficulty
    options: Optional[List[str]] = None
    correct_answer: Optional[str] = None
    starter_code: Optional[str] = None
    test_cases: Optional[List[TestCase]] = None
    topics: List[str] = Field(default_factory=list)
    acceptance: int
    submissions_count: int
    created_by: Optional[int] = None
    created_at: datetime


def validate_question_fields(type, options, correct_answer, test_cases) -> None:
    """Check the fields a question of ``type`` cannot do without."""
    if type == QuestionType.mcq:
        if not options or len(options) < 2:
            raise InvalidInput("Multiple-choice questions need at least two options")
        if len(set(options)) != len(options):
            raise InvalidInput("Options must all be different")
        if correct_answer is None or correct_answer not in options:
            raise InvalidInput("correctAnswer must be one of the options")
    elif type == QuestionType.coding:
        if not test_cases:
            raise InvalidInput("Coding questions need at least one test case")


def dedupe_topics(topics: List[str]) -> List[str]:
    seen = []
    for topic in topics:
        topic = topic.strip()
        if topic and topic not in seen:
            seen.append(topic)
    return seen


# --- submissions ---

class SubmissionCreate(CamelModel):
    question_id: int
    code: Optional[str] = None
    answer: Optional[str] = None
    language: Optional[str] = None


class SubmissionRead(CamelModel):
    id: int
    user_id: int
    question_id: int
    code: Optional[str] = None
    answer: Optional[str] = None
    language: Optional[str] = None
    status: SubmissionStatus
    runtime: Optional[int] = None
    memory: Optional[int] = None
    score: Optional[int] = None
    test_cases_passed: int
    total_test_cases: int
    error_message: Optional[str] = None
    submitted_at: datetime


# --- execution ---

class ExecuteRequest(CamelModel):
    code: str
    language: str
    test_cases: List[TestCase]


class TestResult(CamelModel):
    test_case: int
    input: str
    expected_output: str
    actual_output: Optional[str] = None
    status: SubmissionStatus
    runtime: int
    memory: int


class ExecutionReport(CamelModel):
    status: SubmissionStatus
    runtime: int
    memory: int
    test_results: List[TestResult]
    passed_tests: int
    total_tests: int
    error_message: Optional[str] = None


# --- stats ---

class UserStats(CamelModel):
    total_submissions: int
    accepted_submissions: int
    success_rate: float
    average_runtime: float
    current_streak: int


class AdminStats(CamelModel):
    active_students: int
    total_questions: int
    daily_submissions: int
    success_rate: float
