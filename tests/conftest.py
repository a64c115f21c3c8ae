import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from codepractice.auth import get_password_hash
from codepractice.config import Settings
from codepractice.errors import ExecutorUnavailable
from codepractice.judge.runner import Executor, build_report
from codepractice.main import create_app
from codepractice.models import Question, Role, SubmissionStatus, User
from codepractice.schemas import TestResult

TEST_SECRET = "test-secret"


class ScriptedExecutor(Executor):
    """Executor whose per-test verdicts are set by the test."""

    def __init__(self, languages):
        super().__init__(languages)
        self.verdicts = []
        self.unavailable = False
        self.calls = []

    def execute(self, code, language, test_cases):
        self.check_language(language)
        self.calls.append((code, language, list(test_cases)))
        if self.unavailable:
            raise ExecutorUnavailable()
        results = []
        for index, case in enumerate(test_cases, start=1):
            status = self.verdicts[index - 1] if index <= len(self.verdicts) else SubmissionStatus.accepted
            results.append(TestResult(
                test_case=index,
                input=case.input,
                expected_output=case.expected_output,
                actual_output=case.expected_output if status == SubmissionStatus.accepted else "",
                status=status,
                runtime=100,
                memory=42,
            ))
        return build_report(results)


@pytest.fixture
def settings():
    return Settings(secret_key=TEST_SECRET, database_url="sqlite://", executor_seed=7)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def scripted_executor(app, settings):
    executor = ScriptedExecutor(settings.languages)
    app.state.executor = executor
    return executor


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def engine(app, client):
    # tables exist once the client has run startup
    return app.state.engine


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


def _make_user(engine, username, email, password, role):
    with Session(engine) as s:
        user = User(username=username, email=email, password_hash=get_password_hash(password), role=role)
        s.add(user)
        s.commit()
        s.refresh(user)
        user_id = user.id
    with Session(engine) as s:
        return s.get(User, user_id)


@pytest.fixture
def admin_user(engine):
    return _make_user(engine, "admin", "admin@example.com", "admin123", Role.admin)


@pytest.fixture
def student_user(engine):
    return _make_user(engine, "alice", "alice@example.com", "testpass123", Role.student)


@pytest.fixture
def other_student(engine):
    return _make_user(engine, "bob", "bob@example.com", "testpass123", Role.student)


def bearer(app, user):
    return {"Authorization": f"Bearer {app.state.auth_gate.create_access_token(user.id)}"}


@pytest.fixture
def admin_headers(app, admin_user):
    return bearer(app, admin_user)


@pytest.fixture
def student_headers(app, student_user):
    return bearer(app, student_user)


@pytest.fixture
def mcq_question(engine, admin_user):
    with Session(engine) as s:
        question = Question(
            title="JavaScript Basics",
            description="What is the output of console.log(typeof null)?",
            type="mcq",
            difficulty="easy",
            options=["null", "undefined", "object", "boolean"],
            correct_answer="object",
            topics=["JavaScript"],
            created_by=admin_user.id,
        )
        s.add(question)
        s.commit()
        s.refresh(question)
        question_id = question.id
    with Session(engine) as s:
        return s.get(Question, question_id)


@pytest.fixture
def coding_question(engine, admin_user):
    with Session(engine) as s:
        question = Question(
            title="Two Sum",
            description="Return indices of the two numbers that add up to target.",
            type="coding",
            difficulty="easy",
            starter_code="def two_sum(nums, target):\n    return []\n",
            test_cases=[
                {"input": "[2,7,11,15], 9", "expectedOutput": "[0,1]"},
                {"input": "[3,2,4], 6", "expectedOutput": "[1,2]"},
                {"input": "[3,3], 6", "expectedOutput": "[0,1]"},
            ],
            topics=["Array", "Hash Table"],
            created_by=admin_user.id,
        )
        s.add(question)
        s.commit()
        s.refresh(question)
        question_id = question.id
    with Session(engine) as s:
        return s.get(Question, question_id)


@pytest.fixture
def headers_for(app):
    return lambda user: bearer(app, user)
