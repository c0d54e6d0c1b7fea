# mcq_practice/schemas/statistics.py
from datetime import datetime

from pydantic import BaseModel


class TopicPerformance(BaseModel):
    id: int
    name: str
    session_count: int
    average_score: float


class RecentActivity(BaseModel):
    id: int
    user: str
    topic: str
    score: float
    completed_at: datetime | None = None


class DashboardStatistics(BaseModel):
    student_count: int
    question_count: int
    session_count: int
    average_score: float | None = None
    topic_performance: list[TopicPerformance]
    recent_activity: list[RecentActivity]


class StudentStatistics(BaseModel):
    attempted: int
    accuracy: float
    sessions_count: int
