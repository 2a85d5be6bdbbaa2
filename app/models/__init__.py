from app.models.user import User, UserRole
from app.models.curriculum import Subject, Topic, Lesson, Question
from app.models.assessment import Quiz, QuizResult

__all__ = [
    "User", "UserRole", "Subject", "Topic", "Lesson", "Question",
    "Quiz", "QuizResult"
]
