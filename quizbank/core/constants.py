"""
Enumerations shared by the question bank, the quiz lifecycle and the API.
"""
from enum import Enum


class QuestionType(str, Enum):
    MCQ = "MCQ"
    TRUE_FALSE = "TRUE_FALSE"
    SHORT_ANSWER = "SHORT_ANSWER"
    FILL_BLANK = "FILL_BLANK"


class Difficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"
    MIXED = "MIXED"  # criteria only: no difficulty filter


class QuizScope(str, Enum):
    LESSON = "lesson"
    UNIT = "unit"
    SUBJECT = "subject"
    COMPREHENSIVE = "comprehensive"


class ProgressStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


# Spellings the generator is known to produce, keyed by the upper-cased raw value
QUESTION_TYPE_ALIASES = {
    "MCQ": QuestionType.MCQ,
    "MULTIPLECHOICE": QuestionType.MCQ,
    "MULTIPLE_CHOICE": QuestionType.MCQ,
    "TRUE_FALSE": QuestionType.TRUE_FALSE,
    "TRUEFALSE": QuestionType.TRUE_FALSE,
    "FILL_BLANK": QuestionType.FILL_BLANK,
    "FILLBLANK": QuestionType.FILL_BLANK,
    "SHORT_ANSWER": QuestionType.SHORT_ANSWER,
    "SHORTANSWER": QuestionType.SHORT_ANSWER,
}

TRUE_ANSWERS = {"true", "صح", "صحيح", "1"}
FALSE_ANSWERS = {"false", "خطأ", "خاطئ", "0"}
