"""
Quiz assembly and attempt lifecycle services.
"""
from .question_bank import QuestionBankService
from .quiz_service import QuizService
from .comprehensive_quiz import ComprehensiveQuizService
from .answer_checker import check_answer

__all__ = [
    "QuestionBankService",
    "QuizService",
    "ComprehensiveQuizService",
    "check_answer",
]
