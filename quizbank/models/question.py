"""
Question model - the authored ("static") question store.

Generated ("dynamic") questions never reach this table; they live only inside
the frozen question list of the attempt they were generated for.
"""
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from quizbank.db.base import Base, generate_id


class Question(Base):
    """Assessable question owned by a lesson."""

    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint("times_used >= 0", name="ck_questions_times_used"),
        CheckConstraint("success_rate >= 0 AND success_rate <= 100", name="ck_questions_success_rate"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    lesson_id = Column(String(36), ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False, default="MCQ")  # MCQ, TRUE_FALSE, SHORT_ANSWER, FILL_BLANK
    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=True)  # List of choices, MCQ only
    correct_answer = Column(String, nullable=False)
    explanation = Column(Text, nullable=True)
    difficulty = Column(String, nullable=False, default="MEDIUM")  # EASY, MEDIUM, HARD
    points = Column(Integer, nullable=False, default=1)

    is_dynamic = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Usage statistics
    times_used = Column(Integer, default=0, nullable=False, index=True)
    success_rate = Column(Float, default=0.0, nullable=False)  # Percentage
    last_used_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    lesson = relationship("Lesson", back_populates="questions")
