"""
Lesson question generator.
Asks an LLM for fresh quiz questions about a single lesson. The output is raw:
the question bank validates and normalises every item before it reaches a quiz.
"""
import logging
import json
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy.orm import Session

from quizbank.core.llm_config import LLMFactory
from quizbank.core.agents.prompts import (
    QUESTION_GENERATION_SYSTEM_PROMPT,
    QUESTION_GENERATION_USER_PROMPT
)
from quizbank.models.curriculum import Lesson

logger = logging.getLogger(__name__)

MAX_LESSON_CONTENT_CHARS = 6000


class QuestionGenerator(Protocol):
    """Contract of the dynamic question source used by the question bank."""

    def generate_quiz_questions(
        self,
        lesson_id: str,
        count: int,
        user_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        ...


class LLMQuestionGenerator:
    """
    Generates new quiz questions for a lesson using an LLM.
    """

    def __init__(self, db: Session, llm: Any = None):
        self.db = db
        self._llm = llm

    @property
    def llm(self) -> Any:
        # Client is built on first invoke
        if self._llm is None:
            self._llm = LLMFactory.create_llm(tracing_project="lesson-question-generation")
        return self._llm

    def generate_quiz_questions(
        self,
        lesson_id: str,
        count: int,
        user_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Generate raw quiz questions for a lesson.

        Args:
            lesson_id: Lesson to write questions about
            count: Number of questions wanted
            user_id: Student the quiz is for, used for log context only

        Returns:
            List of raw question dicts, possibly malformed

        Raises:
            ValueError: If the lesson does not exist or the response is not JSON
        """
        try:
            lesson = self.db.query(Lesson).filter(Lesson.id == lesson_id).first()
            if not lesson:
                raise ValueError(f"Lesson {lesson_id} not found")

            content = str(lesson.content or lesson.title)[:MAX_LESSON_CONTENT_CHARS]
            user_prompt = QUESTION_GENERATION_USER_PROMPT.format(
                count=count,
                title=lesson.title,
                content=content
            )

            logger.info(f"Generating {count} questions for lesson {lesson_id} (user {user_id}) with LLM...")

            messages = [
                {"role": "system", "content": QUESTION_GENERATION_SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt}
            ]

            response = self.llm.invoke(messages)
            questions = parse_generated_questions(str(response.content))

            logger.info(f"LLM returned {len(questions)} questions for lesson {lesson_id}")

            return questions

        except Exception as e:
            logger.error(f"Error generating questions for lesson {lesson_id}: {e}")
            raise


def parse_generated_questions(response_text: str) -> List[Dict[str, Any]]:
    """
    Extract the question list from an LLM response.

    Accepts a bare JSON array or an object with a 'questions' key, optionally
    wrapped in a markdown code fence. Non-object items are dropped.
    """
    if "```json" in response_text:
        start = response_text.find("```json") + 7
        end = response_text.find("```", start)
        response_text = response_text[start:end if end != -1 else None].strip()
    elif "```" in response_text:
        start = response_text.find("```") + 3
        end = response_text.find("```", start)
        response_text = response_text[start:end if end != -1 else None].strip()

    try:
        data = json.loads(response_text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Response is not valid JSON: {e}") from e

    if isinstance(data, dict):
        data = data.get("questions")

    if not isinstance(data, list):
        raise ValueError("Response does not contain a question list")

    return [q for q in data if isinstance(q, dict)]
