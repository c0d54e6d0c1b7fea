import pytest
from fastapi.testclient import TestClient

from conftest import login, make_question, make_user
from mcq_practice.main import app
from mcq_practice.models.practice_session import PracticeSession, SessionQuestion


@pytest.fixture
def ten_questions(db_session, topic):
    return [
        make_question(db_session, topic=topic, text=f"Q{i}", correct="ABCD"[i % 4])
        for i in range(10)
    ]


def answers_for(questions, selected, seconds=6):
    return [
        {"question_id": q.id, "selected_option": s, "time_spent": seconds}
        for q, s in zip(questions, selected)
    ]


class TestCreateSession:
    def test_seven_correct_three_unanswered(self, student_client, db_session, topic, ten_questions):
        selected = [q.correct_option for q in ten_questions[:7]] + [None] * 3
        response = student_client.post(
            "/api/v1/sessions/",
            json={"topic_id": topic.id, "answers": answers_for(ten_questions, selected)},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["total_questions"] == 10
        assert body["correct_answers"] == 7
        assert body["score"] == 70.0
        assert body["time_spent"] == 60
        assert body["topic_name"] == topic.name

        rows = (
            db_session.query(SessionQuestion)
            .filter(SessionQuestion.session_id == body["id"])
            .all()
        )
        assert len(rows) == 10
        assert sum(r.is_correct for r in rows) == 7
        assert sum(r.selected_option is None for r in rows) == 3

    def test_client_cannot_inflate_score(self, student_client, ten_questions):
        wrong = ["D" if q.correct_option != "D" else "A" for q in ten_questions]
        response = student_client.post(
            "/api/v1/sessions/",
            json={"answers": answers_for(ten_questions, wrong), "score": 100},
        )
        assert response.status_code == 201
        assert response.json()["score"] == 0.0
        assert response.json()["topic_id"] is None

    def test_empty_session_rejected(self, student_client):
        response = student_client.post("/api/v1/sessions/", json={"answers": []})
        assert response.status_code == 422

    def test_unknown_question_writes_nothing(self, student_client, db_session, ten_questions):
        answers = answers_for(ten_questions[:2], ["A", "B"])
        answers.append({"question_id": 999, "selected_option": "A", "time_spent": 1})
        response = student_client.post("/api/v1/sessions/", json={"answers": answers})
        assert response.status_code == 400
        assert db_session.query(PracticeSession).count() == 0
        assert db_session.query(SessionQuestion).count() == 0

    def test_duplicate_question_rejected(self, student_client, ten_questions):
        q = ten_questions[0]
        answers = answers_for([q, q], ["A", "A"])
        response = student_client.post("/api/v1/sessions/", json={"answers": answers})
        assert response.status_code == 400

    def test_invalid_option_rejected(self, student_client, ten_questions):
        answers = answers_for(ten_questions[:1], ["E"])
        response = student_client.post("/api/v1/sessions/", json={"answers": answers})
        assert response.status_code == 422

    def test_unknown_topic(self, student_client, ten_questions):
        response = student_client.post(
            "/api/v1/sessions/",
            json={"topic_id": 999, "answers": answers_for(ten_questions[:1], ["A"])},
        )
        assert response.status_code == 404

    def test_requires_login(self, client):
        response = client.post("/api/v1/sessions/", json={"answers": [{"question_id": 1}]})
        assert response.status_code == 401


class TestSessionQuestionsEndpoint:
    def test_append_until_full(self, student_client, db_session, student_user, ten_questions):
        session = PracticeSession(
            user_id=student_user.id, total_questions=2, correct_answers=0, score=0.0
        )
        db_session.add(session)
        db_session.commit()
        url = f"/api/v1/sessions/{session.id}/questions"

        first = student_client.post(
            url, json={"question_id": ten_questions[0].id, "selected_option": "A"}
        )
        assert first.status_code == 201
        assert first.json()["is_correct"] is True

        dup = student_client.post(url, json={"question_id": ten_questions[0].id})
        assert dup.status_code == 409

        second = student_client.post(
            url, json={"question_id": ten_questions[1].id, "selected_option": "A"}
        )
        assert second.json()["is_correct"] is False

        third = student_client.post(url, json={"question_id": ten_questions[2].id})
        assert third.status_code == 409


class TestReadingSessions:
    @pytest.fixture
    def own_session_id(self, student_client, ten_questions):
        selected = ["A"] * 10
        response = student_client.post(
            "/api/v1/sessions/", json={"answers": answers_for(ten_questions, selected)}
        )
        return response.json()["id"]

    def test_history_newest_first(self, student_client, own_session_id, ten_questions):
        second = student_client.post(
            "/api/v1/sessions/", json={"answers": answers_for(ten_questions[:1], ["A"])}
        ).json()["id"]
        history = student_client.get("/api/v1/sessions/user").json()
        assert [s["id"] for s in history] == [second, own_session_id]

    def test_detail(self, student_client, own_session_id):
        body = student_client.get(f"/api/v1/sessions/{own_session_id}").json()
        assert body["username"] == "student"
        assert body["topic_name"] is None
        assert len(body["questions"]) == 10

    def test_review_includes_answer_key(self, student_client, own_session_id, ten_questions):
        review = student_client.get(f"/api/v1/sessions/{own_session_id}/questions").json()
        assert [r["question_id"] for r in review] == [q.id for q in ten_questions]
        assert review[1]["question"]["correct_option"] == "B"
        assert review[1]["is_correct"] is False

    def test_other_students_cannot_read(self, own_session_id, override_db, db_session):
        make_user(db_session, username="other", password="secret1")
        other = TestClient(app)
        login(other, "other", "secret1")
        assert other.get(f"/api/v1/sessions/{own_session_id}").status_code == 403
        assert other.get(f"/api/v1/sessions/{own_session_id}/questions").status_code == 403

    def test_admin_reads_everything(self, admin_client, own_session_id, student_user):
        assert admin_client.get(f"/api/v1/sessions/{own_session_id}").status_code == 200
        listed = admin_client.get("/api/v1/sessions/", params={"user_id": student_user.id})
        assert [s["id"] for s in listed.json()] == [own_session_id]

    def test_students_cannot_list_all(self, student_client):
        assert student_client.get("/api/v1/sessions/").status_code == 403

    def test_missing_session(self, student_client):
        assert student_client.get("/api/v1/sessions/999").status_code == 404

    def test_deleting_student_removes_sessions(
        self, admin_client, own_session_id, student_user, db_session
    ):
        assert admin_client.delete(f"/api/v1/users/{student_user.id}").status_code == 204
        db_session.expire_all()
        assert db_session.query(PracticeSession).count() == 0
        assert db_session.query(SessionQuestion).count() == 0
