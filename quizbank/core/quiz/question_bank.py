"""
Question bank.
Blends authored ("static") questions from the store with freshly generated
("dynamic") ones, and keeps the usage/success statistics of static questions
up to date.

Concurrency: selection and the usage increment are separate statements, so two
quizzes assembled at the same time can both pick the same least-used
questions. The increment itself is a single SQL expression. Success-rate
updates are an unlocked read-modify-write and may lose updates under
concurrent answers to the same question.
"""
import logging
import math
import random
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quizbank.core.agents.question_generator import QuestionGenerator
from quizbank.core.config import settings
from quizbank.core.constants import Difficulty, QuestionType, QUESTION_TYPE_ALIASES
from quizbank.models.question import Question
from quizbank.models.quiz_attempt import QuizAttempt, QuizAttemptAnswer
from quizbank.schemas.question import QuestionCriteria, QuestionPayload

logger = logging.getLogger(__name__)


class QuestionBankService:
    """
    Hybrid question source.

    Targets a static share of ``ceil(count * QUIZ_STATIC_RATIO)`` questions.
    Whatever the store cannot supply is requested from the generator, so a
    poor static pool is compensated by generation rather than producing a
    short quiz.
    """

    def __init__(self, db: Session, generator: Optional[QuestionGenerator] = None):
        self.db = db
        self.generator = generator

    def get_questions(self, criteria: QuestionCriteria) -> List[Dict[str, Any]]:
        """
        Get up to ``criteria.count`` questions matching the criteria.

        Args:
            criteria: Lessons, difficulty, types, recency exclusion and count

        Returns:
            Shuffled list of question dicts (QuestionPayload shape). May be
            shorter than requested when both sources run dry.
        """
        count = criteria.count
        logger.info(
            f"Getting {count} questions for lessons {criteria.lesson_ids} "
            f"(difficulty={criteria.difficulty.value}, exclude_recent={criteria.exclude_recent})"
        )

        static_target = math.ceil(round(count * settings.QUIZ_STATIC_RATIO, 9))

        candidates = self._static_candidates(criteria, static_target)
        random.shuffle(candidates)
        selected = candidates[:static_target]
        reserve = candidates[static_target:]

        needed = count - len(selected)
        dynamic_questions: List[Dict[str, Any]] = []
        if needed > 0:
            dynamic_questions = self._generate_dynamic_questions(criteria, needed)

        # Leftover candidates cover whatever generation could not
        shortfall = count - len(selected) - len(dynamic_questions)
        if shortfall > 0 and reserve:
            logger.info(f"Backfilling {min(shortfall, len(reserve))} static questions after generation shortfall")
            selected.extend(reserve[:shortfall])

        static_questions = [self._serialize(q) for q in selected]
        self._mark_used(selected)

        logger.info(
            f"Question bank: {len(static_questions)} static, {len(dynamic_questions)} dynamic "
            f"for {count} requested"
        )

        combined = static_questions + dynamic_questions
        random.shuffle(combined)
        return combined[:count]

    def update_question_stats(self, question_id: str, is_correct: bool) -> None:
        """
        Fold one scored answer into a static question's success rate.

        The stored rate is read as a percentage over ``times_used`` trials.
        Unknown questions and questions never used are skipped. Never raises.
        """
        try:
            question = self.db.query(Question).filter(Question.id == question_id).first()

            if not question:
                logger.warning(f"Question {question_id} not found for stats update")
                return

            total_attempts = int(question.times_used or 0)  # type: ignore
            if total_attempts == 0:
                return

            current_successes = (float(question.success_rate or 0.0) / 100) * total_attempts  # type: ignore
            new_successes = current_successes + (1 if is_correct else 0)
            new_success_rate = min(100.0, max(0.0, new_successes / total_attempts * 100))

            question.success_rate = round(new_success_rate, 2)  # type: ignore
            self.db.commit()

            logger.info(f"Updated question {question_id} success_rate to {new_success_rate:.2f}%")

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating question stats for {question_id}: {e}")

    # ============= Static questions =============

    def _static_candidates(self, criteria: QuestionCriteria, target: int) -> List[Question]:
        """Least-used matching questions, up to a multiple of the target."""
        query = self.db.query(Question).filter(
            Question.is_active.is_(True),
            Question.is_dynamic.is_(False)
        )

        if criteria.lesson_ids:
            query = query.filter(Question.lesson_id.in_(criteria.lesson_ids))

        if criteria.difficulty != Difficulty.MIXED:
            query = query.filter(Question.difficulty == criteria.difficulty.value)

        if criteria.types:
            query = query.filter(Question.type.in_([t.value for t in criteria.types]))

        if criteria.exclude_recent and criteria.user_id:
            recent_ids = self._recent_question_ids(criteria.user_id)
            if recent_ids:
                query = query.filter(Question.id.notin_(recent_ids))

        return query.order_by(Question.times_used.asc()).limit(
            target * settings.QUIZ_CANDIDATE_MULTIPLIER
        ).all()

    def _recent_question_ids(self, user_id: str) -> List[str]:
        rows = self.db.query(QuizAttemptAnswer.question_id).join(
            QuizAttempt, QuizAttempt.id == QuizAttemptAnswer.attempt_id
        ).filter(
            QuizAttempt.user_id == user_id
        ).order_by(
            QuizAttemptAnswer.created_at.desc()
        ).limit(settings.QUIZ_RECENT_ANSWER_WINDOW).all()

        return [row[0] for row in rows]

    def _mark_used(self, questions: List[Question]) -> None:
        """Selection counts as use, whether or not the question is answered."""
        if not questions:
            return

        try:
            self.db.query(Question).filter(
                Question.id.in_([q.id for q in questions])
            ).update(
                {
                    Question.times_used: Question.times_used + 1,
                    Question.last_used_at: datetime.now(timezone.utc),
                },
                synchronize_session=False
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    @staticmethod
    def _serialize(question: Question) -> Dict[str, Any]:
        return QuestionPayload.model_validate(question).model_dump(mode="json")

    # ============= Dynamic questions =============

    def _generate_dynamic_questions(self, criteria: QuestionCriteria, count: int) -> List[Dict[str, Any]]:
        if not criteria.lesson_ids:
            logger.warning("No lesson ids provided for dynamic generation")
            return []

        if self.generator is None:
            logger.warning("No question generator configured, skipping dynamic generation")
            return []

        lesson_id = criteria.lesson_ids[0]

        try:
            raw_questions = self.generator.generate_quiz_questions(lesson_id, count, criteria.user_id)
        except Exception as e:
            logger.error(f"Error generating dynamic questions for lesson {lesson_id}: {e}")
            return []

        raw_questions = raw_questions or []
        valid_questions = []
        for raw in raw_questions:
            question = self._normalize_generated_question(raw, lesson_id, criteria)
            if question is not None:
                valid_questions.append(question)

        logger.info(f"Question bank: {len(raw_questions)} generated, {len(valid_questions)} valid")

        return valid_questions[:count]

    def _normalize_generated_question(
        self,
        raw: Dict[str, Any],
        lesson_id: str,
        criteria: QuestionCriteria
    ) -> Optional[Dict[str, Any]]:
        """Validate one generator item and shape it like a stored question, or return None."""
        if not isinstance(raw, dict):
            return _reject(raw, "not an object")

        text = str(raw.get("question") or "").strip()
        if len(text) < settings.QUIZ_MIN_QUESTION_LENGTH:
            return _reject(raw, "question text too short")
        if "[" in text or "]" in text:
            return _reject(raw, "placeholder brackets in question text")

        raw_type = raw.get("type")
        correct_answer = raw.get("correct_answer")
        if correct_answer is None:
            correct_answer = raw.get("correctAnswer")
        if not raw_type or correct_answer is None or str(correct_answer).strip() == "":
            return _reject(raw, "missing type or correct answer")

        question_type = normalize_question_type(str(raw_type))
        if question_type is None:
            return _reject(raw, f"unknown question type {raw_type!r}")
        if criteria.types and question_type not in criteria.types:
            return _reject(raw, f"question type {question_type.value} not requested")

        options = None
        if question_type == QuestionType.MCQ:
            options = _option_texts(raw.get("options"))
            if len(options) < 2:
                return _reject(raw, "multiple choice question with fewer than 2 options")

        if isinstance(correct_answer, bool):
            correct_answer = "true" if correct_answer else "false"

        explanation = raw.get("explanation")

        payload = QuestionPayload(
            id=f"dynamic_{uuid.uuid4().hex}",
            lesson_id=lesson_id,
            type=question_type,
            question=text,
            options=options,
            correct_answer=str(correct_answer).strip(),
            explanation=str(explanation) if explanation else None,
            difficulty=_generated_difficulty(raw.get("difficulty"), criteria.difficulty),
            points=_int_or_default(raw.get("points"), 1),
            is_dynamic=True,
            times_used=0,
            success_rate=0.0
        )
        return payload.model_dump(mode="json")


def normalize_question_type(raw_type: str) -> Optional[QuestionType]:
    """Map generator spellings (any case, spaces or hyphens) onto QuestionType."""
    key = raw_type.strip().upper().replace(" ", "_").replace("-", "_")
    return QUESTION_TYPE_ALIASES.get(key)


def _option_texts(options: Any) -> List[str]:
    if isinstance(options, dict):
        options = list(options.values())
    if not isinstance(options, list):
        return []

    texts = []
    for option in options:
        if isinstance(option, dict):
            option = option.get("text")
        if option is not None and str(option).strip():
            texts.append(str(option).strip())
    return texts


def _generated_difficulty(raw_difficulty: Any, requested: Difficulty) -> Difficulty:
    try:
        difficulty = Difficulty(str(raw_difficulty).strip().upper())
    except ValueError:
        difficulty = requested
    if difficulty == Difficulty.MIXED:
        return Difficulty.MEDIUM
    return difficulty


def _int_or_default(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _reject(raw: Any, reason: str) -> None:
    logger.warning(f"Rejected generated question ({reason}): {str(raw)[:120]}")
    return None
