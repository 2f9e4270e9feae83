"""
User model - owner of lesson progress and quiz attempts.
"""
from sqlalchemy import Boolean, Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from quizbank.db.base import Base, generate_id


class User(Base):
    """User model."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    role = Column(String, default="student")  # student, parent, admin
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    lesson_progress = relationship(
        "LessonProgress", back_populates="user", cascade="all, delete-orphan"
    )
    quiz_attempts = relationship("QuizAttempt", back_populates="user", cascade="all, delete-orphan")
