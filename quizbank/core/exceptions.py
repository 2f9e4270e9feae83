"""
Domain errors raised by the quiz services.

Handlers registered in ``quizbank.main`` turn ``NotFoundError`` into 404
responses and every other ``QuizError`` into 400 responses.
"""


class QuizError(Exception):
    """Base class for user-facing quiz errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(QuizError):
    """A referenced entity does not exist."""


class AttemptNotFoundError(NotFoundError):
    def __init__(self, attempt_id: str):
        super().__init__(f"Quiz attempt {attempt_id} not found")
        self.attempt_id = attempt_id


class QuestionNotFoundError(NotFoundError):
    def __init__(self, question_id: str):
        super().__init__(f"Question {question_id} not found")
        self.question_id = question_id


class NoCompletedLessonsError(QuizError):
    def __init__(self):
        super().__init__("No completed lessons available for a comprehensive quiz")


class EmptyScopeError(QuizError):
    """A unit or subject resolved to zero lessons."""

    def __init__(self, scope: str, scope_id: str):
        super().__init__(f"No lessons found in {scope} {scope_id}")
        self.scope = scope
        self.scope_id = scope_id


class AnswerAlreadySubmittedError(QuizError):
    def __init__(self, attempt_id: str, question_id: str):
        super().__init__(f"Question {question_id} already answered in attempt {attempt_id}")
        self.attempt_id = attempt_id
        self.question_id = question_id


class LessonNotFoundError(NotFoundError):
    def __init__(self, lesson_id: str):
        super().__init__(f"Lesson {lesson_id} not found")
        self.lesson_id = lesson_id
