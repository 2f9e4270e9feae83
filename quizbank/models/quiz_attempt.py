"""
Models for tracking user quiz attempts and their answers.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, JSON, DateTime, ForeignKey, Float, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from quizbank.db.base import Base, generate_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuizAttempt(Base):
    """Quiz attempt model - one student taking one quiz."""

    __tablename__ = "quiz_attempts"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Anchor lesson; multi-lesson scope lives in quiz_metadata
    lesson_id = Column(String(36), ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)

    total_questions = Column(Integer, default=0)
    correct_answers = Column(Integer, default=0)
    score = Column(Float, default=0.0)  # Percentage
    time_spent = Column(Integer, default=0)  # Seconds

    # Scope and the frozen question list, see schemas.quiz.QuizMetadata
    quiz_metadata = Column("metadata", JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="quiz_attempts")
    lesson = relationship("Lesson")
    answers = relationship(
        "QuizAttemptAnswer",
        back_populates="attempt",
        cascade="all, delete-orphan",
        order_by="QuizAttemptAnswer.created_at",
    )


class QuizAttemptAnswer(Base):
    """A single submitted answer, write-once."""

    __tablename__ = "quiz_attempt_answers"
    __table_args__ = (UniqueConstraint("attempt_id", "question_id", name="uq_attempt_answer_question"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    attempt_id = Column(String(36), ForeignKey("quiz_attempts.id", ondelete="CASCADE"), nullable=False, index=True)
    # Not a foreign key: dynamic question ids never exist in the question table
    question_id = Column(String(64), nullable=False, index=True)

    user_answer = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False)
    time_spent = Column(Integer, nullable=True)  # Time in seconds

    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())

    # Relationships
    attempt = relationship("QuizAttempt", back_populates="answers")
