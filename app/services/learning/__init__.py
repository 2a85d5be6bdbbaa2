# ============================================================================
# Learning Services Module
# ============================================================================
"""
Curriculum content: subjects, topics and lessons.
"""

from app.services.learning.subject_service import SubjectService
from app.services.learning.topic_service import TopicService
from app.services.learning.lesson_service import LessonService

__all__ = [
    "SubjectService",
    "TopicService",
    "LessonService",
]
