import io

import pytest

from conftest import make_question, make_topic
from mcq_practice.models.question import Question
from mcq_practice.models.topic import Topic
from mcq_practice.models.practice_session import PracticeSession, SessionQuestion

QUESTION = {
    "text": "Which organelle makes ATP?",
    "option_a": "Nucleus",
    "option_b": "Mitochondrion",
    "option_c": "Ribosome",
    "option_d": "Golgi",
    "correct_option": "B",
    "explanation": "Oxidative phosphorylation.",
}

BULK_TEXT = """QUESTION: What is 2 + 2?
TOPIC: Math
OPTION A: 3
OPTION B: 4
OPTION C: 5
OPTION D: 6
CORRECT: B

QUESTION: Largest planet?
TOPIC: Astronomy
SUBTOPIC: Planets
DIFFICULTY: easy
OPTION A: Mars
OPTION B: Venus
OPTION C: Jupiter
OPTION D: Earth
CORRECT: C
EXPLANATION: By mass and volume.
"""


class TestQuestionCrud:
    def test_create(self, admin_client, topic):
        response = admin_client.post("/api/v1/questions/", json=dict(QUESTION, topic_id=topic.id))
        assert response.status_code == 201
        body = response.json()
        assert body["difficulty"] == "medium"
        assert body["topic_id"] == topic.id

    def test_create_for_unknown_topic(self, admin_client):
        response = admin_client.post("/api/v1/questions/", json=dict(QUESTION, topic_id=999))
        assert response.status_code == 404

    def test_invalid_correct_option(self, admin_client):
        response = admin_client.post("/api/v1/questions/", json=dict(QUESTION, correct_option="E"))
        assert response.status_code == 422

    def test_students_cannot_create(self, student_client):
        assert student_client.post("/api/v1/questions/", json=QUESTION).status_code == 403

    def test_list_by_topic(self, student_client, db_session):
        bio = make_topic(db_session, "Biology")
        other = make_topic(db_session, "Other")
        make_question(db_session, topic=bio, text="bio question")
        make_question(db_session, topic=other, text="other question")

        response = student_client.get("/api/v1/questions/", params={"topic_id": bio.id})
        assert [q["text"] for q in response.json()] == ["bio question"]

    def test_update(self, admin_client, db_session, topic):
        q = make_question(db_session, topic=topic)
        response = admin_client.put(
            f"/api/v1/questions/{q.id}", json={"correct_option": "D", "difficulty": "hard"}
        )
        assert response.status_code == 200
        assert response.json()["correct_option"] == "D"
        assert response.json()["difficulty"] == "hard"

    def test_update_pointing_at_empty_option(self, admin_client, db_session, topic):
        q = make_question(db_session, topic=topic)
        response = admin_client.put(
            f"/api/v1/questions/{q.id}", json={"option_c": "   ", "correct_option": "C"}
        )
        assert response.status_code == 400
        assert admin_client.get(f"/api/v1/questions/{q.id}").json()["correct_option"] == "A"

    @pytest.mark.parametrize(
        "change",
        [
            {"option_b": ""},
            {"text": ""},
            {"text": None},
            {"option_d": None},
            {"correct_option": None},
            {"difficulty": None},
        ],
    )
    def test_update_cannot_clear_required_fields(self, admin_client, db_session, topic, change):
        q = make_question(db_session, topic=topic, text="intact")
        response = admin_client.put(f"/api/v1/questions/{q.id}", json=change)
        assert response.status_code == 422

        stored = admin_client.get(f"/api/v1/questions/{q.id}").json()
        assert stored["text"] == "intact"
        assert stored["option_b"] == "second"
        assert stored["option_d"] == "fourth"

    def test_update_rejects_whitespace_text(self, admin_client, student_client, db_session, topic):
        q = make_question(db_session, topic=topic, text="intact")
        response = admin_client.put(
            f"/api/v1/questions/{q.id}", json={"text": "  ", "option_b": " "}
        )
        assert response.status_code == 400
        assert "text, option_b" in response.json()["detail"]

        sample = student_client.get("/api/v1/questions/random", params={"count": 5})
        assert sample.status_code == 200
        assert [x["text"] for x in sample.json()] == ["intact"]

    def test_update_can_clear_optional_fields(self, admin_client, db_session, topic):
        q = make_question(db_session, topic=topic, explanation="why")
        response = admin_client.put(
            f"/api/v1/questions/{q.id}", json={"explanation": None, "topic_id": None}
        )
        assert response.status_code == 200
        assert response.json()["explanation"] is None
        assert response.json()["topic_id"] is None

    def test_delete(self, admin_client, db_session, topic):
        q = make_question(db_session, topic=topic)
        assert admin_client.delete(f"/api/v1/questions/{q.id}").status_code == 204
        assert admin_client.get(f"/api/v1/questions/{q.id}").status_code == 404

    def test_delete_answered_question_is_refused(
        self, admin_client, db_session, topic, student_user
    ):
        q = make_question(db_session, topic=topic)
        session = PracticeSession(
            user_id=student_user.id, total_questions=1, correct_answers=0, score=0.0
        )
        session.questions = [SessionQuestion(question_id=q.id, is_correct=False)]
        db_session.add(session)
        db_session.commit()

        assert admin_client.delete(f"/api/v1/questions/{q.id}").status_code == 409


class TestRandomQuestions:
    def test_random_from_topic(self, student_client, db_session):
        bio = make_topic(db_session, "Biology")
        other = make_topic(db_session, "Other")
        for i in range(6):
            make_question(db_session, topic=bio, text=f"bio {i}")
        make_question(db_session, topic=other)

        response = student_client.get(
            "/api/v1/questions/random", params={"count": 5, "topic_id": bio.id}
        )
        assert response.status_code == 200
        body = response.json()
        assert len(body) == 5
        assert len({q["id"] for q in body}) == 5
        assert all(q["topic_id"] == bio.id for q in body)

    def test_all_is_capped_by_bank_size(self, student_client, db_session, topic):
        for _ in range(3):
            make_question(db_session, topic=topic)
        response = student_client.get("/api/v1/questions/random", params={"count": 9999})
        assert len(response.json()) == 3

    def test_count_bounds(self, student_client):
        assert student_client.get("/api/v1/questions/random", params={"count": 0}).status_code == 422
        assert student_client.get("/api/v1/questions/random", params={"count": 10000}).status_code == 422


class TestBulkImport:
    def test_bulk_text_creates_topics(self, admin_client, db_session):
        make_topic(db_session, "math")
        response = admin_client.post("/api/v1/questions/bulk-text", json={"text": BULK_TEXT})

        assert response.status_code == 201
        assert response.json() == {"message": "Successfully added 2 questions", "count": 2}

        db_session.expire_all()
        assert sorted(t.name for t in db_session.query(Topic).all()) == ["Astronomy", "math"]
        planet = db_session.query(Question).filter(Question.correct_option == "C").one()
        assert planet.subtopic == "Planets"
        assert planet.difficulty == "easy"

    def test_bulk_text_bad_correct_value(self, admin_client, db_session):
        text = BULK_TEXT.replace("CORRECT: C", "CORRECT: X")
        response = admin_client.post("/api/v1/questions/bulk-text", json={"text": text})
        assert response.status_code == 400
        assert "incorrect 'CORRECT' values" in response.json()["detail"]
        assert db_session.query(Question).count() == 0

    def test_bulk_text_nothing_valid(self, admin_client):
        response = admin_client.post("/api/v1/questions/bulk-text", json={"text": "hello"})
        assert response.status_code == 400

    def test_upload_bulk_file(self, admin_client):
        response = admin_client.post(
            "/api/v1/questions/upload-bulk",
            files={"file": ("questions.txt", BULK_TEXT.encode("utf-8"), "text/plain")},
        )
        assert response.status_code == 201
        assert response.json()["count"] == 2

    def test_bulk_json(self, admin_client):
        payload = {
            "questions": [
                {
                    "text": "Capital of France?",
                    "topic": "Geography",
                    "option_a": "Paris",
                    "option_b": "Rome",
                    "option_c": "Berlin",
                    "option_d": "Madrid",
                    "correct_option": "A",
                }
            ]
        }
        response = admin_client.post("/api/v1/questions/bulk", json=payload)
        assert response.status_code == 201
        assert response.json()["count"] == 1

    def test_students_cannot_import(self, student_client):
        response = student_client.post("/api/v1/questions/bulk-text", json={"text": BULK_TEXT})
        assert response.status_code == 403


class TestImageUpload:
    def test_upload_and_serve(self, admin_client):
        response = admin_client.post(
            "/api/v1/questions/upload-image",
            files={"file": ("cell.png", io.BytesIO(b"\x89PNG fake"), "image/png")},
        )
        assert response.status_code == 201
        path = response.json()["image_path"]
        assert path.startswith("/uploads/images/") and path.endswith(".png")

        served = admin_client.get(path)
        assert served.status_code == 200
        assert served.content == b"\x89PNG fake"

    def test_rejects_other_types(self, admin_client):
        response = admin_client.post(
            "/api/v1/questions/upload-image",
            files={"file": ("notes.exe", io.BytesIO(b"MZ"), "application/octet-stream")},
        )
        assert response.status_code == 400
