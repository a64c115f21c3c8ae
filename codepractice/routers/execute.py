from fastapi import APIRouter, Depends

from codepractice.auth import get_current_user
from codepractice.judge.runner import Executor, get_executor
from codepractice.models import User
from codepractice.schemas import ExecuteRequest, ExecutionReport

router = APIRouter(prefix="/execute", tags=["execute"])


@router.post("", response_model=ExecutionReport)
def execute(
    body: ExecuteRequest,
    current_user: User = Depends(get_current_user),
    executor: Executor = Depends(get_executor),
):
    """Run code against caller-supplied test cases without recording anything."""
    return executor.execute(body.code, body.language, body.test_cases)
