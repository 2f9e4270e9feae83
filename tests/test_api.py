# FILE: tests/test_api.py

import pytest
from fastapi.testclient import TestClient

from quizbank.core.dependencies import get_question_generator
from quizbank.db.base import get_db
from quizbank.main import app

PREFIX = "/api/v1/quiz"


@pytest.fixture
def client(db, generator):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_question_generator] = lambda: generator
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").json()["status"] == "healthy"


def test_lesson_quiz_round_trip(client, user, lesson, make_questions):
    make_questions(lesson, 10)

    started = client.post(f"{PREFIX}/start", json={"user_id": user.id, "lesson_id": lesson.id, "question_count": 5})
    assert started.status_code == 201
    session = started.json()
    assert len(session["questions"]) == 5
    assert session["time_limit"] == 1800000

    for i, question in enumerate(session["questions"]):
        answer = question["correct_answer"] if i < 3 else "wrong"
        response = client.post(f"{PREFIX}/answer", json={
            "attempt_id": session["attempt_id"],
            "question_id": question["id"],
            "answer": answer,
            "time_spent": 10,
        })
        assert response.status_code == 200
        assert response.json()["is_correct"] is (i < 3)

    completed = client.post(f"{PREFIX}/complete/{session['attempt_id']}")
    assert completed.status_code == 200
    result = completed.json()
    assert result["score"] == 60.0
    assert result["passed"] is True
    assert result["time_spent"] == 50
    assert len(result["question_results"]) == 5

    history = client.get(f"{PREFIX}/history", params={"user_id": user.id}).json()
    assert history["total_attempts"] == 1
    assert history["best_score"] == 60.0

    stats = client.get(f"{PREFIX}/statistics/{lesson.id}").json()
    assert stats["total_attempts"] == 1
    assert stats["pass_rate"] == 100.0


def test_generate_questions_preview(client, lesson, make_questions, generator):
    make_questions(lesson, 10, difficulty="EASY")

    response = client.post(f"{PREFIX}/generate", json={"lesson_id": lesson.id, "count": 5, "difficulty": "EASY"})

    assert response.status_code == 200
    assert len(response.json()) == 5
    assert generator.calls[0]["user_id"] is None


def test_start_quiz_unknown_lesson(client, user):
    response = client.post(f"{PREFIX}/start", json={"user_id": user.id, "lesson_id": "missing-lesson"})

    assert response.status_code == 404
    assert "missing-lesson" in response.json()["detail"]


def test_start_quiz_question_count_out_of_range(client, user, lesson):
    response = client.post(f"{PREFIX}/start", json={"user_id": user.id, "lesson_id": lesson.id, "question_count": 50})

    assert response.status_code == 422


def test_duplicate_answer_is_bad_request(client, user, lesson, make_questions):
    make_questions(lesson, 10)
    session = client.post(f"{PREFIX}/start", json={"user_id": user.id, "lesson_id": lesson.id}).json()
    body = {
        "attempt_id": session["attempt_id"],
        "question_id": session["questions"][0]["id"],
        "answer": "Right",
        "time_spent": 3,
    }

    assert client.post(f"{PREFIX}/answer", json=body).status_code == 200
    assert client.post(f"{PREFIX}/answer", json=body).status_code == 400


def test_answer_unknown_attempt(client):
    response = client.post(f"{PREFIX}/answer", json={
        "attempt_id": "missing-attempt", "question_id": "q", "answer": "a", "time_spent": 1
    })

    assert response.status_code == 404


def test_complete_unknown_attempt(client):
    assert client.post(f"{PREFIX}/complete/missing-attempt").status_code == 404


def test_unit_quiz_and_details(client, user, unit, make_lesson, make_questions):
    for order in (1, 2):
        make_questions(make_lesson(title=f"Lesson {order}", order=order), 10)

    response = client.post(f"{PREFIX}/unit/{unit.id}/start", json={"user_id": user.id, "max_questions": 15})
    assert response.status_code == 201
    quiz = response.json()
    assert quiz["total_questions"] == 15
    assert quiz["lessons_included"] == 2

    details = client.get(f"{PREFIX}/{quiz['attempt_id']}/details")
    assert details.status_code == 200
    assert details.json()["questions"] == quiz["questions"]
    assert details.json()["type"] == "unit"


def test_unit_quiz_empty_unit(client, user, unit):
    response = client.post(f"{PREFIX}/unit/{unit.id}/start", json={"user_id": user.id})

    assert response.status_code == 400
    assert "No lessons" in response.json()["detail"]


def test_subject_quiz_budget_validation(client, user, subject):
    response = client.post(f"{PREFIX}/subject/{subject.id}/start", json={"user_id": user.id, "max_questions": 5})

    assert response.status_code == 422


def test_comprehensive_quiz(client, user, lesson, make_questions, complete_lesson):
    make_questions(lesson, 10)
    complete_lesson(user, lesson)

    response = client.post(f"{PREFIX}/comprehensive/start", json={"user_id": user.id, "max_questions": 5})

    assert response.status_code == 201
    assert response.json()["type"] == "comprehensive"
    assert response.json()["total_questions"] == 5


def test_comprehensive_quiz_without_completed_lessons(client, user):
    response = client.post(f"{PREFIX}/comprehensive/start", json={"user_id": user.id})

    assert response.status_code == 400


def test_details_unknown_attempt(client):
    assert client.get(f"{PREFIX}/missing-attempt/details").status_code == 404
