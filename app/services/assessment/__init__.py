# ============================================================================
# Assessment Services Module
# ============================================================================
"""
Question bank, quizzes and recorded quiz attempts.
"""

from app.services.assessment.question_service import QuestionService
from app.services.assessment.quiz_service import QuizService
from app.services.assessment.quiz_result_service import QuizResultService

__all__ = [
    "QuestionService",
    "QuizService",
    "QuizResultService",
]
