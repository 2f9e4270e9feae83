"""Models module - Import all models here so metadata.create_all sees them."""
from quizbank.db.base import Base
from quizbank.models.user import User
from quizbank.models.curriculum import Subject, Unit, Lesson
from quizbank.models.learning import LessonProgress
from quizbank.models.question import Question
from quizbank.models.quiz_attempt import QuizAttempt, QuizAttemptAnswer

__all__ = ["Base", "User", "Subject", "Unit", "Lesson", "LessonProgress", "Question", "QuizAttempt", "QuizAttemptAnswer"]
