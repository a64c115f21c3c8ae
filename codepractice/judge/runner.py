from abc import ABC, abstractmethod
import random
import logging
from typing import Iterable, List, Optional, Sequence

from fastapi import Request

from codepractice.errors import InvalidInput
from codepractice.models import SubmissionStatus
from codepractice.schemas import ExecutionReport, TestCase, TestResult

logger = logging.getLogger(__name__)


class Executor(ABC):
    """Runs source code against test cases and reports a verdict per test.

    Implementations must bound wall-clock time and memory, report
    time_limit_exceeded / runtime_error / compilation_error as verdicts, and
    raise ``ExecutorUnavailable`` when the backend itself cannot be reached.
    """

    def __init__(self, languages: Iterable[str]):
        self.languages = tuple(languages)

    def check_language(self, language: Optional[str]) -> str:
        lang = (language or "").strip().lower()
        if lang not in self.languages:
            raise InvalidInput(f"language must be one of: {', '.join(self.languages)}")
        return lang

    @abstractmethod
    def execute(self, code: str, language: str, test_cases: Sequence[TestCase]) -> ExecutionReport:
        ...


def build_report(results: List[TestResult]) -> ExecutionReport:
    passed_tests = sum(1 for r in results if r.status == SubmissionStatus.accepted)
    total_tests = len(results)
    status = SubmissionStatus.accepted
    error_message = None
    for r in results:
        if r.status != SubmissionStatus.accepted:
            status = r.status
            error_message = f"Passed {passed_tests}/{total_tests} tests"
            break
    runtime = sum(r.runtime for r in results) // total_tests if total_tests else 0
    memory = sum(r.memory for r in results) // total_tests if total_tests else 0
    return ExecutionReport(
        status=status,
        runtime=runtime,
        memory=memory,
        test_results=results,
        passed_tests=passed_tests,
        total_tests=total_tests,
        error_message=error_message,
    )


class MockExecutor(Executor):
    """Stand-in that never runs anything: every test passes.

    Runtime is drawn from 50-149 ms and memory from 40-49 MB per test.
    """

    def __init__(self, languages: Iterable[str], seed: Optional[int] = None):
        super().__init__(languages)
        self._rng = random.Random(seed)

    def execute(self, code: str, language: str, test_cases: Sequence[TestCase]) -> ExecutionReport:
        lang = self.check_language(language)
        results = []
        for index, case in enumerate(test_cases, start=1):
            results.append(TestResult(
                test_case=index,
                input=case.input,
                expected_output=case.expected_output,
                actual_output=case.expected_output,
                status=SubmissionStatus.accepted,
                runtime=self._rng.randint(50, 149),
                memory=self._rng.randint(40, 49),
            ))
        report = build_report(results)
        logger.debug("Mock execution (%s): %d/%d passed", lang, report.passed_tests, report.total_tests)
        return report


def get_executor(request: Request) -> Executor:
    return request.app.state.executor
