"""
Quiz attempt lifecycle: start, answer, complete, plus history and statistics.

An attempt freezes the questions it was started with in its metadata; every
later read (answer grading, results, details) replays against that list and
never re-queries the question bank.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from quizbank.core.config import settings
from quizbank.core.constants import Difficulty, QuestionType
from quizbank.core.exceptions import (
    AnswerAlreadySubmittedError,
    AttemptNotFoundError,
    LessonNotFoundError,
    QuestionNotFoundError,
)
from quizbank.core.quiz.answer_checker import check_answer
from quizbank.core.quiz.question_bank import QuestionBankService
from quizbank.models.curriculum import Lesson
from quizbank.models.question import Question
from quizbank.models.quiz_attempt import QuizAttempt, QuizAttemptAnswer
from quizbank.schemas.question import QuestionCriteria, QuestionPayload
from quizbank.schemas.quiz import (
    AttemptSummary,
    LessonQuizMetadata,
    QuestionResult,
    QuizHistory,
    QuizResult,
    QuizSession,
    QuizStatistics,
    quiz_metadata_adapter,
)

logger = logging.getLogger(__name__)

LESSON_QUIZ_TYPES = [QuestionType.MCQ, QuestionType.TRUE_FALSE, QuestionType.SHORT_ANSWER]


def decode_attempt_metadata(attempt: QuizAttempt):
    """Decode an attempt's stored metadata, or None when it is absent or unreadable."""
    raw = attempt.quiz_metadata
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            logger.error(f"Error parsing metadata of attempt {attempt.id}: {e}")
            return None

    if not raw:
        return None

    try:
        return quiz_metadata_adapter.validate_python(raw)
    except ValidationError as e:
        logger.error(f"Invalid metadata on attempt {attempt.id}: {e}")
        return None


def read_attempt_metadata(attempt: QuizAttempt):
    """
    Decode an attempt's stored metadata into its QuizMetadata variant.

    Attempts without usable metadata read as a lesson quiz on the anchor
    lesson with no frozen questions.
    """
    metadata = decode_attempt_metadata(attempt)
    if metadata is None:
        return LessonQuizMetadata(lesson_ids=[str(attempt.lesson_id)], questions=[])
    return metadata


class QuizService:
    """Single-lesson quizzes and the answer/score lifecycle shared by all quiz kinds."""

    def __init__(self, db: Session, question_bank: Optional[QuestionBankService] = None):
        self.db = db
        self.question_bank = question_bank or QuestionBankService(db)

    def generate_quiz_questions(
        self,
        lesson_id: str,
        count: Optional[int] = None,
        difficulty: Optional[Difficulty] = None,
        user_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Get questions for one lesson from the question bank.

        Recency exclusion applies only when a user id is given.
        """
        count = count or settings.QUIZ_DEFAULT_QUESTION_COUNT
        logger.info(f"Generating {count} questions for lesson {lesson_id}")

        questions = self.question_bank.get_questions(QuestionCriteria(
            lesson_ids=[lesson_id],
            difficulty=difficulty or Difficulty.MIXED,
            types=LESSON_QUIZ_TYPES,
            exclude_recent=bool(user_id),
            user_id=user_id,
            count=count
        ))

        logger.info(f"Got {len(questions)} questions from question bank")
        return questions

    def start_quiz_attempt(
        self,
        user_id: str,
        lesson_id: str,
        question_count: Optional[int] = None
    ) -> QuizSession:
        """
        Start a lesson quiz.

        ``total_questions`` is the number of questions actually obtained,
        which can be lower than ``question_count``.

        Raises:
            LessonNotFoundError: If the lesson does not exist
        """
        lesson = self.db.query(Lesson).filter(Lesson.id == lesson_id).first()
        if not lesson:
            raise LessonNotFoundError(lesson_id)

        questions = self.generate_quiz_questions(lesson_id, question_count, user_id=user_id)

        metadata = LessonQuizMetadata(lesson_ids=[lesson_id], questions=questions)
        attempt = QuizAttempt(
            user_id=user_id,
            lesson_id=lesson_id,
            total_questions=len(questions),
            correct_answers=0,
            score=0,
            quiz_metadata=metadata.model_dump(mode="json")
        )
        self._save(attempt)

        logger.info(f"Started quiz attempt {attempt.id} for user {user_id} with {len(questions)} questions")

        return QuizSession(
            attempt_id=str(attempt.id),
            questions=questions,
            current_question=0,
            start_time=datetime.now(timezone.utc),
            time_limit=settings.QUIZ_TIME_LIMIT_MS
        )

    def submit_answer(
        self,
        attempt_id: str,
        question_id: str,
        answer: str,
        time_spent: int
    ) -> bool:
        """
        Grade and record one answer.

        The attempt's running total is left alone; it is recomputed when the
        quiz is completed. Statistics of static questions are updated on a
        best-effort basis.

        Raises:
            AttemptNotFoundError: If the attempt does not exist
            QuestionNotFoundError: If the question is not part of the attempt
            AnswerAlreadySubmittedError: If the question was already answered
        """
        attempt = self._get_attempt(attempt_id)
        question = self._find_attempt_question(attempt, question_id)

        existing = self.db.query(QuizAttemptAnswer).filter(
            QuizAttemptAnswer.attempt_id == attempt_id,
            QuizAttemptAnswer.question_id == question_id
        ).first()
        if existing:
            raise AnswerAlreadySubmittedError(attempt_id, question_id)

        is_correct = check_answer(question, answer)

        try:
            self._save(QuizAttemptAnswer(
                attempt_id=attempt_id,
                question_id=question_id,
                user_answer=answer,
                is_correct=is_correct,
                time_spent=time_spent
            ))
        except IntegrityError:
            # A concurrent submit won the race for this question
            raise AnswerAlreadySubmittedError(attempt_id, question_id)

        if not question.get("is_dynamic"):
            try:
                self.question_bank.update_question_stats(question_id, is_correct)
            except Exception as e:
                logger.error(f"Skipped stats update for question {question_id}: {e}")

        return is_correct

    def complete_quiz(self, attempt_id: str) -> QuizResult:
        """
        Score an attempt from its recorded answers and persist the result.

        Running it again recomputes the same score; the first completion
        timestamp is kept.

        Raises:
            AttemptNotFoundError: If the attempt does not exist
        """
        attempt = self._get_attempt(attempt_id)
        answers = list(attempt.answers)

        total_questions = len(answers)
        correct_answers = sum(1 for a in answers if a.is_correct)
        percentage = (correct_answers * 100 / total_questions) if total_questions > 0 else 0.0
        passed = percentage >= settings.QUIZ_PASS_THRESHOLD
        time_spent = sum(a.time_spent or 0 for a in answers)

        attempt.correct_answers = correct_answers  # type: ignore
        attempt.score = percentage  # type: ignore
        attempt.time_spent = time_spent  # type: ignore
        if attempt.completed_at is None:
            attempt.completed_at = datetime.now(timezone.utc)  # type: ignore
        self._save(attempt)

        questions_by_id = self._attempt_questions_by_id(attempt, [a.question_id for a in answers])

        question_results = []
        for a in answers:
            question = questions_by_id.get(a.question_id, {})
            question_results.append(QuestionResult(
                question_id=a.question_id,
                question=question.get("question", ""),
                user_answer=a.user_answer,
                correct_answer=question.get("correct_answer", ""),
                is_correct=a.is_correct,
                explanation=question.get("explanation")
            ))

        logger.info(f"Completed quiz attempt {attempt_id}: {correct_answers}/{total_questions} ({percentage:.1f}%)")

        return QuizResult(
            attempt_id=attempt_id,
            score=percentage,
            percentage=percentage,
            passed=passed,
            time_spent=time_spent,
            correct_answers=correct_answers,
            total_questions=total_questions,
            question_results=question_results
        )

    def get_user_quiz_history(self, user_id: str, lesson_id: Optional[str] = None) -> QuizHistory:
        """Most recent attempts of a user, optionally for one lesson."""
        query = self.db.query(QuizAttempt).filter(QuizAttempt.user_id == user_id)
        if lesson_id:
            query = query.filter(QuizAttempt.lesson_id == lesson_id)

        attempts = query.order_by(QuizAttempt.created_at.desc()).limit(settings.QUIZ_HISTORY_LIMIT).all()

        scores = [float(a.score or 0) for a in attempts]
        return QuizHistory(
            attempts=[AttemptSummary.model_validate(a) for a in attempts],
            total_attempts=len(attempts),
            average_score=sum(scores) / len(scores) if scores else 0.0,
            best_score=max(scores) if scores else 0.0,
            last_attempt_date=attempts[0].created_at if attempts else None
        )

    def get_quiz_statistics(self, lesson_id: str) -> QuizStatistics:
        """Aggregate scores and answered-question distributions for a lesson."""
        attempts = self.db.query(QuizAttempt).filter(QuizAttempt.lesson_id == lesson_id).all()

        if not attempts:
            return QuizStatistics(
                total_attempts=0,
                average_score=0.0,
                pass_rate=0.0,
                average_time_spent=0.0,
                difficulty_distribution={},
                question_type_distribution={}
            )

        total_attempts = len(attempts)
        scores = [float(a.score or 0) for a in attempts]
        passed = [s for s in scores if s >= settings.QUIZ_PASS_THRESHOLD]

        difficulty_distribution: Dict[str, int] = {}
        question_type_distribution: Dict[str, int] = {}
        for attempt in attempts:
            answered_ids = [a.question_id for a in attempt.answers]
            questions_by_id = self._attempt_questions_by_id(attempt, answered_ids)
            for question_id in answered_ids:
                question = questions_by_id.get(question_id)
                if not question:
                    continue
                difficulty = str(question.get("difficulty"))
                question_type = str(question.get("type"))
                difficulty_distribution[difficulty] = difficulty_distribution.get(difficulty, 0) + 1
                question_type_distribution[question_type] = question_type_distribution.get(question_type, 0) + 1

        return QuizStatistics(
            total_attempts=total_attempts,
            average_score=sum(scores) / total_attempts,
            pass_rate=len(passed) / total_attempts * 100,
            average_time_spent=sum(float(a.time_spent or 0) for a in attempts) / total_attempts,
            difficulty_distribution=difficulty_distribution,
            question_type_distribution=question_type_distribution
        )

    # ============= Helper Functions =============

    def _get_attempt(self, attempt_id: str) -> QuizAttempt:
        attempt = self.db.query(QuizAttempt).filter(QuizAttempt.id == attempt_id).first()
        if not attempt:
            raise AttemptNotFoundError(attempt_id)
        return attempt

    def _find_attempt_question(self, attempt: QuizAttempt, question_id: str) -> Dict[str, Any]:
        metadata = decode_attempt_metadata(attempt)
        if metadata is not None:
            # The frozen list is authoritative, even when empty
            for question in metadata.questions:
                if question.get("id") == question_id:
                    return question
            raise QuestionNotFoundError(question_id)

        # Attempts recorded without metadata can only hold static questions
        question = self._store_questions([question_id]).get(question_id)
        if question is None:
            raise QuestionNotFoundError(question_id)
        return question

    def _attempt_questions_by_id(self, attempt: QuizAttempt, question_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        metadata = decode_attempt_metadata(attempt)
        if metadata is not None:
            return {q.get("id"): q for q in metadata.questions}
        return self._store_questions(question_ids) if question_ids else {}

    def _store_questions(self, question_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        rows = self.db.query(Question).filter(Question.id.in_(question_ids)).all()
        return {
            str(q.id): QuestionPayload.model_validate(q).model_dump(mode="json") for q in rows
        }

    def _save(self, instance: Any) -> None:
        try:
            self.db.add(instance)
            self.db.commit()
            self.db.refresh(instance)
        except SQLAlchemyError:
            self.db.rollback()
            raise
