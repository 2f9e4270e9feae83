# FILE: tests/test_init_db.py

from quizbank.core.quiz.comprehensive_quiz import ComprehensiveQuizService
from quizbank.core.quiz.question_bank import QuestionBankService
from quizbank.db.init_db import init_db
from quizbank.models import Lesson, Question, Subject, Unit, User


def test_seed_is_idempotent(db):
    init_db(db)
    init_db(db)

    assert db.query(User).count() == 1
    assert db.query(Subject).count() == 1
    assert db.query(Lesson).count() == 2
    assert db.query(Question).count() == 6


def test_seeded_unit_can_be_quizzed(db):
    init_db(db)
    student = db.query(User).one()
    unit = db.query(Unit).one()

    quiz = ComprehensiveQuizService(db, QuestionBankService(db)).create_unit_quiz(student.id, unit.id, max_questions=6)

    assert quiz.lessons_included == 2
    assert quiz.total_questions == 6
