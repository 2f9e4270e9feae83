"""Schemas module - Import all schemas."""
from quizbank.schemas.question import QuestionCriteria, QuestionPayload
from quizbank.schemas.quiz import (
    StartQuizRequest,
    SubmitAnswerRequest,
    GenerateQuestionsRequest,
    ComprehensiveQuizRequest,
    UnitQuizRequest,
    SubjectQuizRequest,
    QuizSession,
    AnswerResult,
    QuizResult,
    QuizHistory,
    QuizStatistics,
    ComposedQuiz,
    QuizDetails,
    QuizMetadata,
)
from quizbank.schemas.common import ErrorResponse

__all__ = [
    "QuestionCriteria",
    "QuestionPayload",
    "StartQuizRequest",
    "SubmitAnswerRequest",
    "GenerateQuestionsRequest",
    "ComprehensiveQuizRequest",
    "UnitQuizRequest",
    "SubjectQuizRequest",
    "QuizSession",
    "AnswerResult",
    "QuizResult",
    "QuizHistory",
    "QuizStatistics",
    "ComposedQuiz",
    "QuizDetails",
    "QuizMetadata",
    "ErrorResponse",
]
