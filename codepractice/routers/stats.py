from fastapi import APIRouter, Depends
from sqlmodel import Session

from codepractice import stats
from codepractice.auth import get_current_user, require_admin
from codepractice.db import get_session
from codepractice.models import User
from codepractice.schemas import AdminStats, UserStats

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/user", response_model=UserStats)
def user_stats(session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    return stats.get_user_stats(session, current_user.id)


@router.get("/admin", response_model=AdminStats)
def admin_stats(session: Session = Depends(get_session), current_user: User = Depends(require_admin)):
    return stats.get_admin_stats(session)
