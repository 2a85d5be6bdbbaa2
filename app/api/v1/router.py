# ============================================================================
# Main API Router
# ============================================================================
from fastapi import APIRouter, Depends

from app.api.deps import rate_limit
from app.api.v1 import auth, lessons, questions, quiz_results, quizzes, subjects, topics, users

api_router = APIRouter(dependencies=[Depends(rate_limit)])

api_router.include_router(auth.router)
api_router.include_router(users.router)
# Curriculum
api_router.include_router(subjects.router)
api_router.include_router(topics.router)
api_router.include_router(lessons.router)
# Assessment
api_router.include_router(questions.router)
api_router.include_router(quizzes.router)
api_router.include_router(quiz_results.router)
