"""API v1 router."""
from fastapi import APIRouter

from quizbank.api.v1 import quiz

api_router = APIRouter()

api_router.include_router(quiz.router, prefix="/quiz", tags=["Quiz"])
