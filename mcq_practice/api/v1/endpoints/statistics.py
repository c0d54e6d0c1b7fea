# mcq_practice/api/v1/endpoints/statistics.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mcq_practice.core.security import get_current_admin, get_current_user
from mcq_practice.db.session import get_db
from mcq_practice.models.user import User
from mcq_practice.schemas.statistics import DashboardStatistics, StudentStatistics
from mcq_practice.services import statistics_service

router = APIRouter(prefix="/statistics", tags=["statistics"])


@router.get("/", response_model=DashboardStatistics)
def dashboard(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return statistics_service.dashboard_statistics(db)


@router.get("/me", response_model=StudentStatistics)
def my_statistics(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return statistics_service.student_statistics(db, user=current_user)
