# mcq_practice/services/statistics_service.py
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from mcq_practice.models.practice_session import PracticeSession
from mcq_practice.models.question import Question
from mcq_practice.models.topic import Topic
from mcq_practice.models.user import ROLE_STUDENT, User
from mcq_practice.schemas.statistics import (
    DashboardStatistics,
    RecentActivity,
    StudentStatistics,
    TopicPerformance,
)

RECENT_ACTIVITY_LIMIT = 10


def dashboard_statistics(db: Session) -> DashboardStatistics:
    """Admin dashboard / analytics figures."""
    student_count = db.query(User).filter(User.role == ROLE_STUDENT).count()
    question_count = db.query(Question).count()
    session_count = db.query(PracticeSession).count()
    average_score = db.query(func.avg(PracticeSession.score)).scalar()

    rows = (
        db.query(
            Topic.id,
            Topic.name,
            func.count(PracticeSession.id),
            func.avg(PracticeSession.score),
        )
        .outerjoin(PracticeSession, PracticeSession.topic_id == Topic.id)
        .group_by(Topic.id, Topic.name)
        .order_by(Topic.name.asc())
        .all()
    )
    topic_performance = [
        TopicPerformance(
            id=topic_id,
            name=name,
            session_count=count,
            average_score=float(avg) if avg is not None else 0.0,
        )
        for topic_id, name, count, avg in rows
    ]

    recent = (
        db.query(PracticeSession)
        .options(joinedload(PracticeSession.user), joinedload(PracticeSession.topic))
        .order_by(PracticeSession.completed_at.desc(), PracticeSession.id.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
        .all()
    )
    recent_activity = [
        RecentActivity(
            id=s.id,
            user=s.user.full_name if s.user else "Unknown",
            topic=s.topic.name if s.topic else "Mixed Topics",
            score=s.score,
            completed_at=s.completed_at,
        )
        for s in recent
    ]

    return DashboardStatistics(
        student_count=student_count,
        question_count=question_count,
        session_count=session_count,
        average_score=float(average_score) if average_score is not None else None,
        topic_performance=topic_performance,
        recent_activity=recent_activity,
    )


def student_statistics(db: Session, *, user: User) -> StudentStatistics:
    sessions_count, attempted, correct = (
        db.query(
            func.count(PracticeSession.id),
            func.coalesce(func.sum(PracticeSession.total_questions), 0),
            func.coalesce(func.sum(PracticeSession.correct_answers), 0),
        )
        .filter(PracticeSession.user_id == user.id)
        .one()
    )
    accuracy = correct / attempted * 100 if attempted else 0.0
    return StudentStatistics(
        attempted=int(attempted),
        accuracy=float(accuracy),
        sessions_count=sessions_count,
    )
