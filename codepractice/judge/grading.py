"""Turns a submission payload into a graded ``Submission`` row.

A submission starts out pending and receives exactly one verdict here,
before it is ever persisted.
"""
from codepractice.errors import InvalidInput
from codepractice.judge.runner import Executor
from codepractice.models import Question, QuestionType, Submission, SubmissionStatus
from codepractice.schemas import SubmissionCreate, TestCase

MAX_SCORE = 100


def grade_mcq(question: Question, payload: SubmissionCreate, user_id: int) -> Submission:
    if payload.answer is None or payload.answer == "":
        raise InvalidInput("answer is required for multiple-choice questions")

    correct = payload.answer == question.correct_answer
    return Submission(
        user_id=user_id,
        question_id=question.id,
        answer=payload.answer,
        status=SubmissionStatus.accepted if correct else SubmissionStatus.wrong_answer,
        score=MAX_SCORE if correct else 0,
        test_cases_passed=1 if correct else 0,
        total_test_cases=1,
    )


def grade_coding(question: Question, payload: SubmissionCreate, user_id: int, executor: Executor) -> Submission:
    if not payload.code or not payload.code.strip():
        raise InvalidInput("code is required for coding questions")
    language = executor.check_language(payload.language)

    test_cases = [TestCase.model_validate(tc) for tc in (question.test_cases or [])]
    report = executor.execute(payload.code, language, test_cases)

    if report.status == SubmissionStatus.accepted:
        score = MAX_SCORE
    elif report.total_tests:
        # Partial scoring
        score = round(MAX_SCORE * report.passed_tests / report.total_tests)
    else:
        score = 0

    return Submission(
        user_id=user_id,
        question_id=question.id,
        code=payload.code,
        language=language,
        status=report.status,
        runtime=report.runtime,
        memory=report.memory,
        score=score,
        test_cases_passed=report.passed_tests,
        total_test_cases=report.total_tests,
        error_message=report.error_message,
    )


def grade(question: Question, payload: SubmissionCreate, user_id: int, executor: Executor) -> Submission:
    if question.type == QuestionType.mcq:
        return grade_mcq(question, payload, user_id)
    return grade_coding(question, payload, user_id, executor)
