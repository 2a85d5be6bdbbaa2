# ============================================================================
# Assessment Models
# ============================================================================
from datetime import datetime, timedelta
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy import Text, JSON, Float, Uuid, select
import uuid
from app.core.database import Base, utcnow, as_utc

class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    subject_id = Column(Uuid, ForeignKey("subjects.id"), nullable=False, index=True)
    topic_ids = Column(JSON, default=list)
    question_ids = Column(JSON, default=list)
    level = Column(String(30))
    difficulty = Column(String(20), default="intermediate", nullable=False)
    total_questions = Column(Integer, default=0, nullable=False)  # kept equal to len(question_ids)
    total_points = Column(Integer, default=0, nullable=False)
    time_limit = Column(Integer)  # minutes
    passing_score = Column(Integer, default=60)  # percent
    tags = Column(JSON, default=list)
    premium_only = Column(Boolean, default=False, nullable=False)

    # Retake policy
    retake_allowed = Column(Boolean, default=True, nullable=False)
    max_attempts = Column(Integer, default=3, nullable=False)
    cooldown_hours = Column(Integer, default=24, nullable=False)

    # Analytics snapshot, recomputed on demand from quiz results
    total_attempts = Column(Integer, default=0, nullable=False)
    average_score = Column(Float, default=0, nullable=False)
    average_time = Column(Float, default=0, nullable=False)
    completion_rate = Column(Float, default=0, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def retake_policy(self) -> dict:
        return {
            "allowed": self.retake_allowed,
            "max_attempts": self.max_attempts,
            "cooldown_hours": self.cooldown_hours,
        }

    @property
    def analytics(self) -> dict:
        return {
            "total_attempts": self.total_attempts,
            "average_score": self.average_score,
            "average_time": self.average_time,
            "completion_rate": self.completion_rate,
        }

    def can_user_retake(self, attempts: int) -> bool:
        if not self.retake_allowed:
            return attempts == 0
        return attempts < self.max_attempts

    def get_next_retake_time(self, last_attempt_at: datetime) -> datetime:
        return as_utc(last_attempt_at) + timedelta(hours=self.cooldown_hours or 0)

    @classmethod
    def popular_query(cls, limit: int = 10):
        return (
            select(cls)
            .where(cls.is_active == True)
            .order_by(cls.total_attempts.desc(), cls.average_score.desc())
            .limit(limit)
        )

    def __repr__(self):
        return f"<Quiz {self.title}>"

class QuizResult(Base):
    __tablename__ = "quiz_results"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    quiz_id = Column(Uuid, ForeignKey("quizzes.id"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    score = Column(Float, nullable=False)
    time_taken = Column(Integer, nullable=False)  # seconds
    answers = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    def __repr__(self):
        return f"<QuizResult {self.quiz_id} user={self.user_id} score={self.score}>"
