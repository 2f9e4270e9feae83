"""
API endpoints for quizzes - lesson quizzes, composed quizzes, answers and results.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from quizbank.core.constants import Difficulty
from quizbank.core.dependencies import get_comprehensive_quiz_service, get_quiz_service
from quizbank.core.quiz.comprehensive_quiz import ComprehensiveQuizService
from quizbank.core.quiz.quiz_service import QuizService
from quizbank.schemas.common import ErrorResponse
from quizbank.schemas.quiz import (
    AnswerResult,
    ComposedQuiz,
    ComprehensiveQuizRequest,
    GenerateQuestionsRequest,
    QuizDetails,
    QuizHistory,
    QuizResult,
    QuizSession,
    QuizStatistics,
    StartQuizRequest,
    SubjectQuizRequest,
    SubmitAnswerRequest,
    UnitQuizRequest,
)

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse}}
BAD_REQUEST = {400: {"model": ErrorResponse}}


# ============= Lesson quizzes =============

@router.post("/start", response_model=QuizSession, status_code=status.HTTP_201_CREATED, responses=NOT_FOUND)
def start_quiz(
    request: StartQuizRequest,
    quiz_service: QuizService = Depends(get_quiz_service)
):
    """
    Start a quiz on a single lesson.

    The number of questions returned can be lower than requested when the
    lesson has too few questions; use ``len(questions)`` as the quiz size.
    """
    return quiz_service.start_quiz_attempt(
        user_id=request.user_id,
        lesson_id=request.lesson_id,
        question_count=request.question_count
    )


@router.post("/answer", response_model=AnswerResult, responses={**NOT_FOUND, **BAD_REQUEST})
def submit_answer(
    request: SubmitAnswerRequest,
    quiz_service: QuizService = Depends(get_quiz_service)
):
    """Grade one answer of a running attempt."""
    is_correct = quiz_service.submit_answer(
        attempt_id=request.attempt_id,
        question_id=request.question_id,
        answer=request.answer,
        time_spent=request.time_spent
    )
    return AnswerResult(
        is_correct=is_correct,
        message="Correct answer" if is_correct else "Incorrect answer"
    )


@router.post("/complete/{attempt_id}", response_model=QuizResult, responses=NOT_FOUND)
def complete_quiz(
    attempt_id: str,
    quiz_service: QuizService = Depends(get_quiz_service)
):
    """Score an attempt from its submitted answers."""
    return quiz_service.complete_quiz(attempt_id)


@router.get("/history", response_model=QuizHistory)
def get_quiz_history(
    user_id: str = Query(..., min_length=1),
    lesson_id: Optional[str] = None,
    quiz_service: QuizService = Depends(get_quiz_service)
):
    """Get a user's most recent quiz attempts."""
    return quiz_service.get_user_quiz_history(user_id, lesson_id)


@router.get("/statistics/{lesson_id}", response_model=QuizStatistics)
def get_quiz_statistics(
    lesson_id: str,
    quiz_service: QuizService = Depends(get_quiz_service)
):
    """Get aggregate quiz statistics for a lesson."""
    return quiz_service.get_quiz_statistics(lesson_id)


@router.post("/generate", response_model=List[Dict[str, Any]])
def generate_questions(
    request: GenerateQuestionsRequest,
    quiz_service: QuizService = Depends(get_quiz_service)
):
    """
    Draw questions for a lesson without starting an attempt.

    Static questions drawn here still count as used.
    """
    difficulty = Difficulty(request.difficulty) if request.difficulty else None
    return quiz_service.generate_quiz_questions(
        lesson_id=request.lesson_id,
        count=request.count,
        difficulty=difficulty
    )


# ============= Composed quizzes =============

@router.post(
    "/comprehensive/start",
    response_model=ComposedQuiz,
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST
)
def start_comprehensive_quiz(
    request: ComprehensiveQuizRequest,
    composer: ComprehensiveQuizService = Depends(get_comprehensive_quiz_service)
):
    """Start a quiz over the user's recently completed lessons."""
    return composer.create_comprehensive_quiz(
        user_id=request.user_id,
        max_questions=request.max_questions,
        difficulty=request.difficulty,
        subject_id=request.subject_id
    )


@router.post(
    "/unit/{unit_id}/start",
    response_model=ComposedQuiz,
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST
)
def start_unit_quiz(
    unit_id: str,
    request: UnitQuizRequest,
    composer: ComprehensiveQuizService = Depends(get_comprehensive_quiz_service)
):
    """Start a quiz over every lesson of a unit."""
    return composer.create_unit_quiz(
        user_id=request.user_id,
        unit_id=unit_id,
        max_questions=request.max_questions
    )


@router.post(
    "/subject/{subject_id}/start",
    response_model=ComposedQuiz,
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST
)
def start_subject_quiz(
    subject_id: str,
    request: SubjectQuizRequest,
    composer: ComprehensiveQuizService = Depends(get_comprehensive_quiz_service)
):
    """Start a quiz over every lesson of a subject."""
    return composer.create_subject_quiz(
        user_id=request.user_id,
        subject_id=subject_id,
        max_questions=request.max_questions
    )


@router.get("/{attempt_id}/details", response_model=QuizDetails, responses=NOT_FOUND)
def get_quiz_details(
    attempt_id: str,
    composer: ComprehensiveQuizService = Depends(get_comprehensive_quiz_service)
):
    """Get an attempt together with the questions it was created with."""
    return composer.get_quiz_details(attempt_id)
