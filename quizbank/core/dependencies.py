"""
Dependency injection for FastAPI endpoints.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from quizbank.core.agents.question_generator import LLMQuestionGenerator, QuestionGenerator
from quizbank.core.quiz.comprehensive_quiz import ComprehensiveQuizService
from quizbank.core.quiz.question_bank import QuestionBankService
from quizbank.core.quiz.quiz_service import QuizService
from quizbank.db.base import get_db


def get_question_generator(db: Session = Depends(get_db)) -> QuestionGenerator:
    """
    Dependency for the dynamic question source.

    Args:
        db: Database session

    Returns:
        LLM-backed question generator
    """
    return LLMQuestionGenerator(db)


def get_question_bank(
    db: Session = Depends(get_db),
    generator: QuestionGenerator = Depends(get_question_generator)
) -> QuestionBankService:
    return QuestionBankService(db, generator)


def get_quiz_service(
    db: Session = Depends(get_db),
    question_bank: QuestionBankService = Depends(get_question_bank)
) -> QuizService:
    return QuizService(db, question_bank)


def get_comprehensive_quiz_service(
    db: Session = Depends(get_db),
    question_bank: QuestionBankService = Depends(get_question_bank)
) -> ComprehensiveQuizService:
    return ComprehensiveQuizService(db, question_bank)
