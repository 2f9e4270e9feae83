"""
Database initialization and seeding.
"""
import logging

from sqlalchemy.orm import Session

from quizbank.models.curriculum import Lesson, Subject, Unit
from quizbank.models.question import Question
from quizbank.models.user import User

logger = logging.getLogger(__name__)

DEMO_LESSONS = [
    {
        "title": "Plant cells",
        "content": "Plant cells have a cell wall made of cellulose, chloroplasts for photosynthesis "
                   "and a large central vacuole that stores water.",
        "questions": [
            {
                "type": "MCQ",
                "question": "Which organelle carries out photosynthesis?",
                "options": ["Chloroplast", "Mitochondrion", "Ribosome", "Nucleus"],
                "correct_answer": "Chloroplast",
                "difficulty": "EASY",
            },
            {
                "type": "TRUE_FALSE",
                "question": "Plant cell walls are made of cellulose.",
                "correct_answer": "true",
                "difficulty": "EASY",
            },
            {
                "type": "SHORT_ANSWER",
                "question": "Name the structure that stores water in a plant cell.",
                "correct_answer": "vacuole",
                "difficulty": "MEDIUM",
            },
        ],
    },
    {
        "title": "Animal cells",
        "content": "Animal cells have no cell wall. Mitochondria release energy through respiration "
                   "and the nucleus holds the genetic material.",
        "questions": [
            {
                "type": "MCQ",
                "question": "Which organelle releases energy through respiration?",
                "options": ["Mitochondrion", "Chloroplast", "Cell wall", "Vacuole"],
                "correct_answer": "Mitochondrion",
                "difficulty": "MEDIUM",
            },
            {
                "type": "TRUE_FALSE",
                "question": "Animal cells are surrounded by a cell wall.",
                "correct_answer": "false",
                "difficulty": "EASY",
            },
            {
                "type": "FILL_BLANK",
                "question": "The genetic material of the cell is kept in the ____.",
                "correct_answer": "nucleus",
                "difficulty": "HARD",
            },
        ],
    },
]


def init_db(db: Session) -> None:
    """
    Initialize database with a demo student and a small curriculum.

    Args:
        db: Database session
    """
    student = db.query(User).filter(User.email == "student@example.com").first()
    if not student:
        student = User(
            email="student@example.com",
            full_name="Demo Student",
            role="student",
            is_active=True,
        )
        db.add(student)
        db.commit()
        logger.info("Demo student created successfully")

    if db.query(Subject).first():
        logger.info("Curriculum already seeded")
        return

    subject = Subject(title="Biology", title_ar="الأحياء", grade=7)
    unit = Unit(title="Cells", order=1)
    subject.units.append(unit)

    for order, data in enumerate(DEMO_LESSONS, start=1):
        lesson = Lesson(title=data["title"], content=data["content"], order=order)
        for q in data["questions"]:
            lesson.questions.append(Question(**q))
        unit.lessons.append(lesson)

    db.add(subject)
    db.commit()
    logger.info(f"Seeded subject '{subject.title}' with {len(DEMO_LESSONS)} lessons")
