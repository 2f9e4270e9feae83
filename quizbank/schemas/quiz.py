"""
Pydantic schemas for quiz attempts, composed quizzes and their stored metadata.
"""
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from quizbank.core.constants import Difficulty


# ============= Attempt metadata (tagged union) =============

class LessonQuizMetadata(BaseModel):
    kind: Literal["lesson"] = "lesson"
    lesson_ids: List[str] = Field(default_factory=list)
    questions: List[Dict[str, Any]] = Field(default_factory=list)


class UnitQuizMetadata(BaseModel):
    kind: Literal["unit"] = "unit"
    unit_id: str
    lesson_ids: List[str]
    questions: List[Dict[str, Any]]


class SubjectQuizMetadata(BaseModel):
    kind: Literal["subject"] = "subject"
    subject_id: str
    lesson_ids: List[str]
    questions: List[Dict[str, Any]]


class ComprehensiveQuizMetadata(BaseModel):
    kind: Literal["comprehensive"] = "comprehensive"
    lesson_ids: List[str]
    questions: List[Dict[str, Any]]
    subject_id: Optional[str] = None


QuizMetadata = Annotated[
    Union[LessonQuizMetadata, UnitQuizMetadata, SubjectQuizMetadata, ComprehensiveQuizMetadata],
    Field(discriminator="kind"),
]

quiz_metadata_adapter: TypeAdapter = TypeAdapter(QuizMetadata)


# ============= Request Schemas =============

class StartQuizRequest(BaseModel):
    """Schema for starting a single-lesson quiz."""
    user_id: str = Field(..., min_length=1)
    lesson_id: str = Field(..., min_length=1)
    question_count: Optional[int] = Field(default=None, ge=1, le=20)


class SubmitAnswerRequest(BaseModel):
    """Schema for submitting one answer."""
    attempt_id: str = Field(..., min_length=1)
    question_id: str = Field(..., min_length=1)
    answer: str
    time_spent: int = Field(..., ge=0, description="Time spent on this question in seconds")


class GenerateQuestionsRequest(BaseModel):
    """Schema for previewing the questions a lesson quiz would get."""
    lesson_id: str = Field(..., min_length=1)
    count: int = Field(default=5, ge=1, le=20)
    difficulty: Optional[Literal["EASY", "MEDIUM", "HARD"]] = None


class ComprehensiveQuizRequest(BaseModel):
    """Schema for starting a quiz over the user's completed lessons."""
    user_id: str = Field(..., min_length=1)
    max_questions: Optional[int] = Field(default=None, ge=5, le=100)
    difficulty: Optional[Difficulty] = None
    subject_id: Optional[str] = None


class UnitQuizRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    max_questions: Optional[int] = Field(default=None, ge=5, le=50)


class SubjectQuizRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    max_questions: Optional[int] = Field(default=None, ge=10, le=100)


# ============= Response Schemas =============

class QuizSession(BaseModel):
    """Schema returned when a lesson quiz starts."""
    attempt_id: str
    questions: List[Dict[str, Any]]
    current_question: int = 0
    start_time: datetime
    time_limit: int = Field(..., description="Advisory time budget in milliseconds")


class AnswerResult(BaseModel):
    is_correct: bool
    message: str


class QuestionResult(BaseModel):
    question_id: str
    question: str
    user_answer: str
    correct_answer: str
    is_correct: bool
    explanation: Optional[str] = None


class QuizResult(BaseModel):
    """Schema for a completed quiz."""
    attempt_id: str
    score: float
    percentage: float
    passed: bool
    time_spent: int
    correct_answers: int
    total_questions: int
    question_results: List[QuestionResult]


class AttemptSummary(BaseModel):
    id: str
    lesson_id: str
    total_questions: int
    correct_answers: int
    score: float
    time_spent: Optional[int] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class QuizHistory(BaseModel):
    attempts: List[AttemptSummary]
    total_attempts: int
    average_score: float
    best_score: float
    last_attempt_date: Optional[datetime] = None


class QuizStatistics(BaseModel):
    total_attempts: int
    average_score: float
    pass_rate: float
    average_time_spent: float
    difficulty_distribution: Dict[str, int]
    question_type_distribution: Dict[str, int]


class ComposedQuiz(BaseModel):
    """Schema returned by the unit, subject and comprehensive quiz builders."""
    attempt_id: str
    questions: List[Dict[str, Any]]
    lessons_included: int
    total_questions: int
    type: str


class QuizDetails(BaseModel):
    attempt_id: str
    type: str
    total_questions: int
    correct_answers: int
    score: float
    completed_at: Optional[datetime] = None
    lessons_included: int
    questions: List[Dict[str, Any]]
    metadata: Dict[str, Any]
