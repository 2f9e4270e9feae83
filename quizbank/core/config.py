"""
Configuration management using Pydantic settings.
"""
from typing import List, Union
import os
from pydantic import AnyHttpUrl, validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    # API Configuration
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Quiz Question Bank"
    DEBUG: bool = True
    ENV: str = os.getenv("ENV", "development")

    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./quizbank.db")

    # LLMs Configuration
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    QUESTION_GENERATION_MODEL: str = os.getenv("QUESTION_GENERATION_MODEL", "gpt-4o-mini")
    QUESTION_GENERATION_TEMPERATURE: float = float(os.getenv("QUESTION_GENERATION_TEMPERATURE", 0.7))

    # LangSmith Tracing Configuration
    LANGSMITH_TRACING: bool = os.getenv("LANGSMITH_TRACING", "false").lower() == "true"
    LANGSMITH_ENDPOINT: str = os.getenv("LANGSMITH_ENDPOINT", "")
    LANGSMITH_API_KEY: str = os.getenv("LANGSMITH_API_KEY", "")
    LANGSMITH_PROJECT: str = os.getenv("LANGSMITH_PROJECT", "")

    # Question bank
    QUIZ_STATIC_RATIO: float = 0.6  # share of each quiz drawn from authored questions
    QUIZ_CANDIDATE_MULTIPLIER: int = 2
    QUIZ_RECENT_ANSWER_WINDOW: int = 20
    QUIZ_MIN_QUESTION_LENGTH: int = 10

    # Quiz lifecycle
    QUIZ_PASS_THRESHOLD: float = 60.0
    QUIZ_TIME_LIMIT_MS: int = 1800000  # 30 minutes, advisory
    QUIZ_DEFAULT_QUESTION_COUNT: int = 5
    QUIZ_HISTORY_LIMIT: int = 20
    QUIZ_COMPLETED_LESSON_LIMIT: int = 20

    # CORS Configuration
    BACKEND_CORS_ORIGINS: Union[List[AnyHttpUrl], str] = "*"

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v):
        if v == "*" or v == ["*"]:
            return "*"
        if isinstance(v, str):
            return [i.strip() for i in v.split(",")]
        return v

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = True


settings = Settings()
