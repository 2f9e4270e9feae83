"""
Multi-lesson quiz composer.
Builds comprehensive (recently completed lessons), unit and subject quizzes on
top of the question bank and records each as a single quiz attempt.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quizbank.core.config import settings
from quizbank.core.constants import Difficulty, ProgressStatus, QuizScope
from quizbank.core.exceptions import AttemptNotFoundError, EmptyScopeError, NoCompletedLessonsError
from quizbank.core.quiz.question_bank import QuestionBankService
from quizbank.core.quiz.quiz_service import read_attempt_metadata
from quizbank.models.curriculum import Lesson, Unit
from quizbank.models.learning import LessonProgress
from quizbank.models.quiz_attempt import QuizAttempt
from quizbank.schemas.question import QuestionCriteria
from quizbank.schemas.quiz import (
    ComposedQuiz,
    ComprehensiveQuizMetadata,
    QuizDetails,
    SubjectQuizMetadata,
    UnitQuizMetadata,
)

logger = logging.getLogger(__name__)

DEFAULT_COMPREHENSIVE_QUESTIONS = 30
DEFAULT_UNIT_QUESTIONS = 15
DEFAULT_SUBJECT_QUESTIONS = 50


class ComprehensiveQuizService:
    """
    Composes quizzes spanning several lessons.

    The attempt's ``lesson_id`` is set to the first lesson in scope; the
    lesson list stored in the attempt metadata is the actual scope.
    """

    def __init__(self, db: Session, question_bank: Optional[QuestionBankService] = None):
        self.db = db
        self.question_bank = question_bank or QuestionBankService(db)

    def create_comprehensive_quiz(
        self,
        user_id: str,
        max_questions: Optional[int] = None,
        difficulty: Optional[Difficulty] = None,
        subject_id: Optional[str] = None
    ) -> ComposedQuiz:
        """
        Build a quiz over the user's most recently completed lessons.

        The budget is split evenly with at least one question per lesson, so
        with more lessons than questions the last lessons get no questions.

        Raises:
            NoCompletedLessonsError: If the user has no completed lessons in scope
        """
        max_questions = max_questions or DEFAULT_COMPREHENSIVE_QUESTIONS

        query = self.db.query(LessonProgress).filter(
            LessonProgress.user_id == user_id,
            LessonProgress.status == ProgressStatus.COMPLETED.value
        )
        if subject_id:
            query = query.join(Lesson, Lesson.id == LessonProgress.lesson_id).join(
                Unit, Unit.id == Lesson.unit_id
            ).filter(Unit.subject_id == subject_id)

        completed = query.order_by(LessonProgress.completed_at.desc()).limit(
            settings.QUIZ_COMPLETED_LESSON_LIMIT
        ).all()

        if not completed:
            raise NoCompletedLessonsError()

        lesson_ids = [str(p.lesson_id) for p in completed]
        per_lesson = max(1, max_questions // len(lesson_ids))

        logger.info(
            f"Creating comprehensive quiz for user {user_id}: {len(lesson_ids)} lessons, "
            f"{per_lesson} questions each"
        )

        questions: List[Dict[str, Any]] = []
        for lesson_id in lesson_ids:
            questions.extend(self.question_bank.get_questions(QuestionCriteria(
                lesson_ids=[lesson_id],
                difficulty=difficulty or Difficulty.MIXED,
                exclude_recent=True,
                user_id=user_id,
                count=per_lesson
            )))
        questions = questions[:max_questions]

        metadata = ComprehensiveQuizMetadata(
            lesson_ids=lesson_ids,
            questions=questions,
            subject_id=subject_id
        )
        return self._record_attempt(user_id, lesson_ids, questions, QuizScope.COMPREHENSIVE, metadata)

    def create_unit_quiz(
        self,
        user_id: str,
        unit_id: str,
        max_questions: Optional[int] = None
    ) -> ComposedQuiz:
        """
        Build a quiz over every lesson of a unit, completed or not.

        Raises:
            EmptyScopeError: If the unit has no lessons
        """
        max_questions = max_questions or DEFAULT_UNIT_QUESTIONS

        lessons = self.db.query(Lesson).filter(Lesson.unit_id == unit_id).order_by(Lesson.order).all()
        if not lessons:
            raise EmptyScopeError("unit", unit_id)

        lesson_ids = [str(lesson.id) for lesson in lessons]
        logger.info(f"Creating unit quiz for user {user_id}: unit {unit_id}, {len(lesson_ids)} lessons")

        questions = self._pooled_questions(user_id, lesson_ids, max_questions)
        metadata = UnitQuizMetadata(unit_id=unit_id, lesson_ids=lesson_ids, questions=questions)
        return self._record_attempt(user_id, lesson_ids, questions, QuizScope.UNIT, metadata)

    def create_subject_quiz(
        self,
        user_id: str,
        subject_id: str,
        max_questions: Optional[int] = None
    ) -> ComposedQuiz:
        """
        Build a quiz over every lesson of every unit of a subject.

        Raises:
            EmptyScopeError: If the subject has no lessons
        """
        max_questions = max_questions or DEFAULT_SUBJECT_QUESTIONS

        lessons = self.db.query(Lesson).join(Unit, Unit.id == Lesson.unit_id).filter(
            Unit.subject_id == subject_id
        ).order_by(Unit.order, Lesson.order).all()
        if not lessons:
            raise EmptyScopeError("subject", subject_id)

        lesson_ids = [str(lesson.id) for lesson in lessons]
        logger.info(f"Creating subject quiz for user {user_id}: subject {subject_id}, {len(lesson_ids)} lessons")

        questions = self._pooled_questions(user_id, lesson_ids, max_questions)
        metadata = SubjectQuizMetadata(subject_id=subject_id, lesson_ids=lesson_ids, questions=questions)
        return self._record_attempt(user_id, lesson_ids, questions, QuizScope.SUBJECT, metadata)

    def get_quiz_details(self, attempt_id: str) -> QuizDetails:
        """
        Return an attempt with the exact question list it was created with.

        Raises:
            AttemptNotFoundError: If the attempt does not exist
        """
        attempt = self.db.query(QuizAttempt).filter(QuizAttempt.id == attempt_id).first()
        if not attempt:
            raise AttemptNotFoundError(attempt_id)

        metadata = read_attempt_metadata(attempt)

        return QuizDetails(
            attempt_id=str(attempt.id),
            type=metadata.kind,
            total_questions=int(attempt.total_questions or 0),  # type: ignore
            correct_answers=int(attempt.correct_answers or 0),  # type: ignore
            score=float(attempt.score or 0),  # type: ignore
            completed_at=attempt.completed_at,  # type: ignore
            lessons_included=len(metadata.lesson_ids),
            questions=metadata.questions,
            metadata=metadata.model_dump(mode="json")
        )

    # ============= Helper Functions =============

    def _pooled_questions(self, user_id: str, lesson_ids: List[str], count: int) -> List[Dict[str, Any]]:
        # One pull across the whole scope; dynamic top-up targets the first lesson
        return self.question_bank.get_questions(QuestionCriteria(
            lesson_ids=lesson_ids,
            difficulty=Difficulty.MIXED,
            exclude_recent=True,
            user_id=user_id,
            count=count
        ))

    def _record_attempt(
        self,
        user_id: str,
        lesson_ids: List[str],
        questions: List[Dict[str, Any]],
        scope: QuizScope,
        metadata: Any
    ) -> ComposedQuiz:
        attempt = QuizAttempt(
            user_id=user_id,
            lesson_id=lesson_ids[0],
            total_questions=len(questions),
            correct_answers=0,
            score=0,
            quiz_metadata=metadata.model_dump(mode="json")
        )

        try:
            self.db.add(attempt)
            self.db.commit()
            self.db.refresh(attempt)
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.info(f"Created {scope.value} quiz attempt {attempt.id} with {len(questions)} questions")

        return ComposedQuiz(
            attempt_id=str(attempt.id),
            questions=questions,
            lessons_included=len(lesson_ids),
            total_questions=len(questions),
            type=scope.value
        )
