# FILE: tests/test_quiz_service.py

import pytest

from quizbank.core.config import settings
from quizbank.core.exceptions import (
    AnswerAlreadySubmittedError,
    AttemptNotFoundError,
    LessonNotFoundError,
    QuestionNotFoundError,
)
from quizbank.core.quiz.question_bank import QuestionBankService
from quizbank.core.quiz.quiz_service import QuizService, read_attempt_metadata
from quizbank.models import Question, QuizAttempt, QuizAttemptAnswer
from tests.fakes import FakeGenerator


@pytest.fixture
def quiz_service(db, question_bank):
    return QuizService(db, question_bank)


def _answer_for(question, correct=True):
    if correct:
        return question["correct_answer"]
    return "definitely not the answer"


def test_start_quiz_attempt_freezes_questions(db, user, lesson, make_questions, quiz_service):
    make_questions(lesson, 10)

    session = quiz_service.start_quiz_attempt(user.id, lesson.id, question_count=5)

    assert len(session.questions) == 5
    assert session.current_question == 0
    assert session.time_limit == 30 * 60 * 1000

    attempt = db.query(QuizAttempt).filter(QuizAttempt.id == session.attempt_id).one()
    assert attempt.total_questions == 5
    assert attempt.completed_at is None
    metadata = read_attempt_metadata(attempt)
    assert metadata.kind == "lesson"
    assert metadata.lesson_ids == [lesson.id]
    assert metadata.questions == session.questions


def test_start_quiz_attempt_defaults_to_five_questions(db, user, lesson, make_questions, quiz_service):
    make_questions(lesson, 10)

    session = quiz_service.start_quiz_attempt(user.id, lesson.id)

    assert len(session.questions) == settings.QUIZ_DEFAULT_QUESTION_COUNT


def test_start_quiz_attempt_records_actual_question_count(db, user, lesson, make_questions):
    make_questions(lesson, 2)
    service = QuizService(db, QuestionBankService(db, FakeGenerator(questions=[])))

    session = service.start_quiz_attempt(user.id, lesson.id, question_count=10)

    attempt = db.query(QuizAttempt).filter(QuizAttempt.id == session.attempt_id).one()
    assert attempt.total_questions == len(session.questions) == 2


def test_start_quiz_attempt_unknown_lesson(db, user, quiz_service):
    with pytest.raises(LessonNotFoundError):
        quiz_service.start_quiz_attempt(user.id, "missing-lesson")
    assert db.query(QuizAttempt).count() == 0


def test_lesson_quiz_excludes_fill_blank_questions(db, user, lesson, make_questions):
    make_questions(lesson, 4, type="FILL_BLANK", options=None, correct_answer="cell")
    service = QuizService(db, QuestionBankService(db))

    session = service.start_quiz_attempt(user.id, lesson.id, question_count=4)

    assert session.questions == []


def test_submit_answer_grades_and_records(db, user, lesson, make_questions, quiz_service):
    make_questions(lesson, 10)
    session = quiz_service.start_quiz_attempt(user.id, lesson.id, question_count=5)
    question = session.questions[0]

    assert quiz_service.submit_answer(session.attempt_id, question["id"], _answer_for(question), 12) is True

    answer = db.query(QuizAttemptAnswer).one()
    assert answer.question_id == question["id"]
    assert answer.is_correct is True
    assert answer.time_spent == 12
    attempt = db.query(QuizAttempt).filter(QuizAttempt.id == session.attempt_id).one()
    # Running total is only recomputed on completion
    assert attempt.correct_answers == 0


def test_submit_answer_updates_static_question_stats(db, user, lesson, make_questions):
    make_questions(lesson, 1)
    service = QuizService(db, QuestionBankService(db))
    session = service.start_quiz_attempt(user.id, lesson.id, question_count=1)
    question = session.questions[0]

    service.submit_answer(session.attempt_id, question["id"], "Right", 5)

    stored = db.query(Question).filter(Question.id == question["id"]).one()
    assert stored.times_used == 1
    assert stored.success_rate == 100.0


def test_submit_answer_for_dynamic_question(db, user, lesson, quiz_service):
    session = quiz_service.start_quiz_attempt(user.id, lesson.id, question_count=2)
    question = session.questions[0]
    assert question["is_dynamic"]

    assert quiz_service.submit_answer(session.attempt_id, question["id"], "option a", 3) is True


def test_submit_answer_stats_failure_is_swallowed(db, user, lesson, make_questions, quiz_service, monkeypatch):
    make_questions(lesson, 10)
    session = quiz_service.start_quiz_attempt(user.id, lesson.id, question_count=5)
    static = next(q for q in session.questions if not q["is_dynamic"])

    def broken(question_id, is_correct):
        raise RuntimeError("stats store down")

    monkeypatch.setattr(quiz_service.question_bank, "update_question_stats", broken)

    assert quiz_service.submit_answer(session.attempt_id, static["id"], "Right", 4) is True
    assert db.query(QuizAttemptAnswer).count() == 1


def test_submit_answer_unknown_attempt(quiz_service):
    with pytest.raises(AttemptNotFoundError):
        quiz_service.submit_answer("missing-attempt", "q", "a", 1)


def test_submit_answer_question_not_in_attempt(db, user, lesson, make_questions, quiz_service):
    make_questions(lesson, 10)
    session = quiz_service.start_quiz_attempt(user.id, lesson.id, question_count=5)

    with pytest.raises(QuestionNotFoundError):
        quiz_service.submit_answer(session.attempt_id, "not-in-this-quiz", "a", 1)


def test_submit_answer_twice_is_rejected(db, user, lesson, make_questions, quiz_service):
    make_questions(lesson, 10)
    session = quiz_service.start_quiz_attempt(user.id, lesson.id, question_count=5)
    question = session.questions[0]
    quiz_service.submit_answer(session.attempt_id, question["id"], _answer_for(question), 5)

    with pytest.raises(AnswerAlreadySubmittedError):
        quiz_service.submit_answer(session.attempt_id, question["id"], "changed my mind", 5)
    assert db.query(QuizAttemptAnswer).count() == 1


def test_submit_answer_concurrent_duplicate_is_rejected(db, user, lesson, make_questions, quiz_service, monkeypatch):
    make_questions(lesson, 10)
    session = quiz_service.start_quiz_attempt(user.id, lesson.id, question_count=5)
    question = session.questions[0]

    def grade_after_competing_submit(question_payload, answer):
        # Another request records the same question between the check and the insert
        db.add(QuizAttemptAnswer(
            attempt_id=session.attempt_id,
            question_id=question["id"],
            user_answer="first",
            is_correct=False,
            time_spent=1,
        ))
        db.commit()
        return True

    monkeypatch.setattr("quizbank.core.quiz.quiz_service.check_answer", grade_after_competing_submit)

    with pytest.raises(AnswerAlreadySubmittedError):
        quiz_service.submit_answer(session.attempt_id, question["id"], "Right", 5)

    answer = db.query(QuizAttemptAnswer).one()
    assert answer.user_answer == "first"


def test_submit_answer_falls_back_to_store(db, user, lesson, make_questions, answered_attempt, quiz_service):
    question = make_questions(lesson, 1)[0]
    attempt = answered_attempt(user, lesson, [])

    assert quiz_service.submit_answer(attempt.id, question.id, "right", 2) is True


def test_empty_frozen_list_rejects_store_questions(db, user, lesson, make_lesson, make_questions):
    foreign = make_questions(make_lesson(title="Other", order=2), 1)[0]
    service = QuizService(db, QuestionBankService(db, FakeGenerator(questions=[])))
    session = service.start_quiz_attempt(user.id, lesson.id)
    assert session.questions == []

    with pytest.raises(QuestionNotFoundError):
        service.submit_answer(session.attempt_id, foreign.id, "Right", 2)

    assert db.query(QuizAttemptAnswer).count() == 0
    db.refresh(foreign)
    assert foreign.times_used == 0
    assert foreign.success_rate == 0.0
    assert service.complete_quiz(session.attempt_id).total_questions == 0


@pytest.mark.parametrize("correct,expected_score,expected_pass", [(7, 70.0, True), (5, 50.0, False), (6, 60.0, True)])
def test_complete_quiz_scoring(db, user, lesson, answered_attempt, quiz_service, correct, expected_score, expected_pass):
    answers = [(f"q{i}", i < correct, 10) for i in range(10)]
    attempt = answered_attempt(user, lesson, answers)

    result = quiz_service.complete_quiz(attempt.id)

    assert result.score == expected_score
    assert result.percentage == expected_score
    assert result.passed is expected_pass
    assert result.correct_answers == correct
    assert result.total_questions == 10
    assert result.time_spent == 100

    db.refresh(attempt)
    assert attempt.correct_answers == correct
    assert attempt.score == expected_score
    assert attempt.time_spent == 100
    assert attempt.completed_at is not None


def test_complete_quiz_without_answers(db, user, lesson, answered_attempt, quiz_service):
    attempt = answered_attempt(user, lesson, [])

    result = quiz_service.complete_quiz(attempt.id)

    assert result.score == 0
    assert result.passed is False


def test_complete_quiz_twice_keeps_result(db, user, lesson, answered_attempt, quiz_service):
    attempt = answered_attempt(user, lesson, [("q1", True, 5), ("q2", False, 5)])

    first = quiz_service.complete_quiz(attempt.id)
    db.refresh(attempt)
    completed_at = attempt.completed_at
    second = quiz_service.complete_quiz(attempt.id)
    db.refresh(attempt)

    assert first.score == second.score == 50.0
    assert attempt.completed_at == completed_at


def test_complete_quiz_reports_frozen_questions(db, user, lesson, make_questions, quiz_service):
    make_questions(lesson, 10)
    session = quiz_service.start_quiz_attempt(user.id, lesson.id, question_count=5)
    for i, question in enumerate(session.questions):
        quiz_service.submit_answer(session.attempt_id, question["id"], _answer_for(question, i % 2 == 0), 5)

    # Later edits to the store do not change what the student is graded against
    db.query(Question).update({Question.question: "Edited", Question.correct_answer: "Edited"})
    db.commit()

    result = quiz_service.complete_quiz(session.attempt_id)

    assert result.correct_answers == 3
    by_id = {r.question_id: r for r in result.question_results}
    for question in session.questions:
        assert by_id[question["id"]].question == question["question"]
        assert by_id[question["id"]].correct_answer == question["correct_answer"]


def test_complete_quiz_unknown_attempt(quiz_service):
    with pytest.raises(AttemptNotFoundError):
        quiz_service.complete_quiz("missing-attempt")


def test_user_quiz_history(db, user, lesson, make_lesson, answered_attempt, quiz_service):
    other_lesson = make_lesson(title="Other", order=2)
    first = answered_attempt(user, lesson, [("q1", True, 5), ("q2", True, 5)])
    quiz_service.complete_quiz(first.id)
    second = answered_attempt(user, lesson, [("q1", True, 5), ("q2", False, 5)])
    quiz_service.complete_quiz(second.id)
    answered_attempt(user, other_lesson, [])

    history = quiz_service.get_user_quiz_history(user.id, lesson_id=lesson.id)

    assert history.total_attempts == 2
    assert history.average_score == 75.0
    assert history.best_score == 100.0
    assert history.last_attempt_date is not None
    assert quiz_service.get_user_quiz_history(user.id).total_attempts == 3


def test_user_quiz_history_empty(quiz_service):
    history = quiz_service.get_user_quiz_history("nobody")

    assert history.total_attempts == 0
    assert history.average_score == 0.0
    assert history.last_attempt_date is None


def test_quiz_statistics(db, user, lesson, make_questions, quiz_service):
    make_questions(lesson, 10, difficulty="EASY")
    for correct in (True, False):
        session = quiz_service.start_quiz_attempt(user.id, lesson.id, question_count=5)
        for question in session.questions:
            quiz_service.submit_answer(session.attempt_id, question["id"], _answer_for(question, correct), 6)
        quiz_service.complete_quiz(session.attempt_id)

    stats = quiz_service.get_quiz_statistics(lesson.id)

    assert stats.total_attempts == 2
    assert stats.average_score == 50.0
    assert stats.pass_rate == 50.0
    assert stats.average_time_spent == 30.0
    assert sum(stats.difficulty_distribution.values()) == 10
    assert stats.question_type_distribution == {"MCQ": 10}


def test_quiz_statistics_without_attempts(quiz_service):
    stats = quiz_service.get_quiz_statistics("unused-lesson")

    assert stats.total_attempts == 0
    assert stats.difficulty_distribution == {}


def test_read_attempt_metadata_tolerates_bad_blobs(db, user, lesson):
    attempt = QuizAttempt(user_id=user.id, lesson_id=lesson.id, quiz_metadata={"kind": "unknown"})
    db.add(attempt)
    db.commit()

    metadata = read_attempt_metadata(attempt)

    assert metadata.kind == "lesson"
    assert metadata.lesson_ids == [lesson.id]
    assert metadata.questions == []
