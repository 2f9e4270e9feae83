from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from quizbank.db.base import Base, generate_id


class Subject(Base):
    """Subject model - top of the curriculum hierarchy."""

    __tablename__ = "subjects"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String, nullable=False)
    title_ar = Column(String, nullable=True)
    grade = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    units = relationship(
        "Unit", back_populates="subject", cascade="all, delete-orphan", order_by="Unit.order"
    )


class Unit(Base):
    """Curriculum unit grouping lessons of a subject."""

    __tablename__ = "units"

    id = Column(String(36), primary_key=True, default=generate_id)
    subject_id = Column(String(36), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    subject = relationship("Subject", back_populates="units")
    lessons = relationship(
        "Lesson", back_populates="unit", cascade="all, delete-orphan", order_by="Lesson.order"
    )


class Lesson(Base):
    """Lesson model. Questions and progress hang off lessons."""

    __tablename__ = "lessons"

    id = Column(String(36), primary_key=True, default=generate_id)
    unit_id = Column(String(36), ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    title_ar = Column(String, nullable=True)
    content = Column(Text, nullable=True)  # lesson body, fed to the question generator
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    unit = relationship("Unit", back_populates="lessons")
    questions = relationship("Question", back_populates="lesson", cascade="all, delete-orphan")
