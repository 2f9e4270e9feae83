import os
from typing import Optional
from langchain_openai import ChatOpenAI
from pydantic import SecretStr
from quizbank.core.config import settings


class LLMFactory:
    """Factory for creating configured LLM instances with tracing."""

    @staticmethod
    def create_llm(
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        tracing_project: Optional[str] = None,
        json_mode: bool = True,
        api_key: Optional[str] = None
    ) -> ChatOpenAI:
        """
        Create a configured ChatOpenAI instance.

        Args:
            model: The model name to use (defaults to QUESTION_GENERATION_MODEL).
            temperature: The temperature for generation (defaults to QUESTION_GENERATION_TEMPERATURE).
            tracing_project: The LangSmith project name for tracing.
            json_mode: Whether to force a JSON object response.
            api_key: OpenAI API key (optional, defaults to settings).

        Raises:
            ValueError: If no OpenAI API key is configured
        """
        api_key = api_key or settings.OPENAI_API_KEY
        if not api_key:
            raise ValueError("OPENAI_API_KEY is not configured")

        if settings.LANGSMITH_TRACING:
            os.environ["LANGCHAIN_TRACING_V2"] = "true"
            os.environ["LANGCHAIN_ENDPOINT"] = settings.LANGSMITH_ENDPOINT
            os.environ["LANGCHAIN_API_KEY"] = settings.LANGSMITH_API_KEY
            os.environ["LANGCHAIN_PROJECT"] = tracing_project or settings.LANGSMITH_PROJECT

        model_kwargs = {"response_format": {"type": "json_object"}} if json_mode else {}

        return ChatOpenAI(
            model=model or settings.QUESTION_GENERATION_MODEL,
            api_key=SecretStr(api_key),
            temperature=settings.QUESTION_GENERATION_TEMPERATURE if temperature is None else temperature,
            model_kwargs=model_kwargs,
        )
