from conftest import make_question, make_topic
from mcq_practice.models.practice_session import PracticeSession


def add_session(db, user, topic, total, correct):
    session = PracticeSession(
        user_id=user.id,
        topic_id=topic.id if topic is not None else None,
        total_questions=total,
        correct_answers=correct,
        score=correct / total * 100,
        time_spent=30,
    )
    db.add(session)
    db.commit()
    return session


class TestDashboard:
    def test_figures(self, admin_client, db_session, student_user):
        bio = make_topic(db_session, "Biology")
        make_topic(db_session, "Chemistry")
        make_question(db_session, topic=bio)
        add_session(db_session, student_user, bio, 10, 8)
        add_session(db_session, student_user, bio, 10, 6)
        add_session(db_session, student_user, None, 4, 1)

        response = admin_client.get("/api/v1/statistics/")
        assert response.status_code == 200
        stats = response.json()

        assert stats["student_count"] == 1
        assert stats["question_count"] == 1
        assert stats["session_count"] == 3
        assert stats["average_score"] == (80 + 60 + 25) / 3

        perf = {t["name"]: t for t in stats["topic_performance"]}
        assert perf["Biology"]["session_count"] == 2
        assert perf["Biology"]["average_score"] == 70.0
        assert perf["Chemistry"]["session_count"] == 0
        assert perf["Chemistry"]["average_score"] == 0.0

        assert len(stats["recent_activity"]) == 3
        assert "Mixed Topics" in {a["topic"] for a in stats["recent_activity"]}
        assert {a["user"] for a in stats["recent_activity"]} == {student_user.full_name}

    def test_empty_platform(self, admin_client):
        stats = admin_client.get("/api/v1/statistics/").json()
        assert stats["session_count"] == 0
        assert stats["average_score"] is None
        assert stats["recent_activity"] == []

    def test_recent_activity_is_capped(self, admin_client, db_session, student_user):
        for _ in range(12):
            add_session(db_session, student_user, None, 2, 1)
        stats = admin_client.get("/api/v1/statistics/").json()
        assert len(stats["recent_activity"]) == 10

    def test_admin_only(self, student_client):
        assert student_client.get("/api/v1/statistics/").status_code == 403


class TestStudentStatistics:
    def test_totals(self, student_client, db_session, student_user, admin_user):
        add_session(db_session, student_user, None, 10, 7)
        add_session(db_session, student_user, None, 10, 9)
        add_session(db_session, admin_user, None, 10, 0)

        stats = student_client.get("/api/v1/statistics/me").json()
        assert stats == {"attempted": 20, "accuracy": 80.0, "sessions_count": 2}

    def test_no_history(self, student_client):
        stats = student_client.get("/api/v1/statistics/me").json()
        assert stats == {"attempted": 0, "accuracy": 0.0, "sessions_count": 0}
