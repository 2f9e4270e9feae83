"""
Pydantic schemas for questions and question-bank criteria.
"""
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from quizbank.core.constants import Difficulty, QuestionType


class QuestionPayload(BaseModel):
    """
    Wire/storage shape of a question handed to a quiz.

    Static questions are dumped from the ORM row; dynamic questions are built
    from validated generator output. Both end up as plain dicts in a quiz's
    frozen question list.
    """

    id: str
    lesson_id: str
    type: QuestionType
    question: str
    options: Optional[List[Any]] = None
    correct_answer: str
    explanation: Optional[str] = None
    difficulty: Difficulty = Difficulty.MEDIUM
    points: int = 1
    is_dynamic: bool = False
    times_used: int = 0
    success_rate: float = 0.0

    # Rows written before these columns were made non-null may still hold NULL
    @field_validator('difficulty', 'points', mode='before')
    @classmethod
    def default_when_null(cls, v, info):
        if v is None:
            return cls.model_fields[info.field_name].default
        return v

    class Config:
        """Pydantic config."""

        from_attributes = True


class QuestionCriteria(BaseModel):
    """Selection criteria for QuestionBankService.get_questions."""

    lesson_ids: List[str] = Field(default_factory=list)
    difficulty: Difficulty = Difficulty.MIXED
    types: Optional[List[QuestionType]] = None
    exclude_recent: bool = False
    user_id: Optional[str] = None
    count: int = Field(..., gt=0)
