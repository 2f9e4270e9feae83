"""
Answer comparison rules.
"""
import re
from typing import Any, Mapping

from quizbank.core.constants import FALSE_ANSWERS, TRUE_ANSWERS, QuestionType

_WHITESPACE = re.compile(r"\s+")


def normalize_answer(value: Any) -> str:
    return str(value if value is not None else "").strip().lower()


def check_answer(question: Mapping[str, Any], user_answer: str) -> bool:
    """
    Grade a raw answer against a question dict.

    All comparisons are trimmed and case-insensitive. TRUE_FALSE accepts the
    Arabic true/false words against any spelling of the canonical answer;
    SHORT_ANSWER and FILL_BLANK tolerate spacing differences.
    """
    answer = normalize_answer(user_answer)
    correct = normalize_answer(question.get("correct_answer"))
    question_type = question.get("type")

    if question_type == QuestionType.TRUE_FALSE.value:
        return (
            answer == correct
            or (answer == "صح" and correct in TRUE_ANSWERS)
            or (answer == "خطأ" and correct in FALSE_ANSWERS)
        )

    if question_type == QuestionType.MCQ.value:
        return answer == correct

    if question_type in (QuestionType.SHORT_ANSWER.value, QuestionType.FILL_BLANK.value):
        return answer == correct or _WHITESPACE.sub("", answer) == _WHITESPACE.sub("", correct)

    return answer == correct
