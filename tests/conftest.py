# FILE: tests/conftest.py

import os
from datetime import datetime, timedelta, timezone

# The app module builds its engine at import time; keep it off the local database file
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quizbank.core.quiz.question_bank import QuestionBankService
from quizbank.models import Base, Lesson, LessonProgress, Question, QuizAttempt, QuizAttemptAnswer, Subject, Unit, User
from tests.fakes import FakeGenerator


@pytest.fixture
def engine():
    """In-memory database shared by every session of a test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def question_bank(db, generator):
    return QuestionBankService(db, generator)


@pytest.fixture
def user(db):
    user = User(email="student@example.com", full_name="Test Student")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def subject(db):
    subject = Subject(title="Science", grade=7)
    db.add(subject)
    db.commit()
    return subject


@pytest.fixture
def make_unit(db, subject):
    def _make_unit(title="Unit", order=1, parent=None):
        unit = Unit(subject_id=(parent or subject).id, title=title, order=order)
        db.add(unit)
        db.commit()
        return unit
    return _make_unit


@pytest.fixture
def unit(make_unit):
    return make_unit()


@pytest.fixture
def make_lesson(db, unit):
    def _make_lesson(title="Lesson", order=1, parent=None, content="Lesson content about cells."):
        lesson = Lesson(unit_id=(parent or unit).id, title=title, order=order, content=content)
        db.add(lesson)
        db.commit()
        return lesson
    return _make_lesson


@pytest.fixture
def lesson(make_lesson):
    return make_lesson()


@pytest.fixture
def make_questions(db):
    """Create ``count`` static questions on a lesson"""
    def _make_questions(lesson, count, **fields):
        questions = []
        for i in range(count):
            data = {
                "lesson_id": lesson.id,
                "type": "MCQ",
                "question": f"{lesson.title} static question {i}?",
                "options": ["Right", "Wrong 1", "Wrong 2", "Wrong 3"],
                "correct_answer": "Right",
                "difficulty": "MEDIUM",
            }
            data.update(fields)
            questions.append(Question(**data))
        db.add_all(questions)
        db.commit()
        return questions
    return _make_questions


@pytest.fixture
def complete_lesson(db):
    """Mark a lesson completed ``minutes_ago`` minutes in the past"""
    def _complete_lesson(user, lesson, minutes_ago=0):
        progress = LessonProgress(
            user_id=user.id,
            lesson_id=lesson.id,
            status="COMPLETED",
            completed_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
        )
        db.add(progress)
        db.commit()
        return progress
    return _complete_lesson


@pytest.fixture
def answered_attempt(db):
    """An attempt with pre-recorded answers given as (question_id, is_correct, time_spent) tuples

    Without ``questions`` the attempt carries no metadata at all.
    """
    def _answered_attempt(user, lesson, answers, questions=None):
        attempt = QuizAttempt(
            user_id=user.id,
            lesson_id=lesson.id,
            total_questions=len(answers),
            quiz_metadata=None if questions is None else {"kind": "lesson", "lesson_ids": [lesson.id], "questions": questions},
        )
        db.add(attempt)
        db.commit()
        for question_id, is_correct, time_spent in answers:
            db.add(QuizAttemptAnswer(
                attempt_id=attempt.id,
                question_id=question_id,
                user_answer="answer",
                is_correct=is_correct,
                time_spent=time_spent,
            ))
        db.commit()
        return attempt
    return _answered_attempt
