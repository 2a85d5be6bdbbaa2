# ============================================================================
# Curriculum Models
# ============================================================================
from typing import Optional
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy import Text, JSON, Float, Index, Uuid, func, select
import uuid
from app.core.database import Base, utcnow, json_array_contains

class Subject(Base):
    __tablename__ = "subjects"

    STAT_FIELDS = ("total_students", "total_lessons", "total_quizzes", "total_questions")

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    code = Column(String(20), unique=True, nullable=False)  # always uppercase
    description = Column(Text)
    category = Column(String(30), nullable=False)
    exam_types = Column(JSON, default=list)  # BAC, BEPC, ...
    countries = Column(JSON, default=list)
    education_levels = Column(JSON, default=list)
    series = Column(JSON, default=list)
    icon = Column(String(50))
    color = Column(String(7))  # hex color
    is_active = Column(Boolean, default=True, nullable=False)
    is_premium = Column(Boolean, default=False, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    status = Column(String(20), default="active", nullable=False)

    # Statistics
    total_students = Column(Integer, default=0, nullable=False)
    total_lessons = Column(Integer, default=0, nullable=False)
    total_quizzes = Column(Integer, default=0, nullable=False)
    total_questions = Column(Integer, default=0, nullable=False)

    created_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("uq_subjects_name_lower", func.lower(name), unique=True),
    )

    @property
    def stats(self) -> dict:
        return {field: getattr(self, field) or 0 for field in self.STAT_FIELDS}

    def update_stats(self, field: str, increment: int = 1) -> None:
        if field not in self.STAT_FIELDS:
            raise ValueError(f"Unknown stats field: {field}")
        setattr(self, field, max(0, (getattr(self, field) or 0) + increment))

    def add_student(self) -> None:
        self.update_stats("total_students", 1)

    @classmethod
    def _listed(cls):
        return select(cls).where(cls.is_active == True, cls.status == "active")

    @classmethod
    def featured_query(cls, limit: int = 6):
        return cls._listed().where(cls.is_featured == True).order_by(cls.name).limit(limit)

    @classmethod
    def popular_query(cls, limit: int = 10):
        return cls._listed().order_by(cls.total_students.desc(), cls.name).limit(limit)

    @classmethod
    def by_education_and_country_query(cls, education_level: str, country: str):
        return (
            cls._listed()
            .where(json_array_contains(cls.education_levels, education_level))
            .where(json_array_contains(cls.countries, country))
            .order_by(cls.name)
        )

    @classmethod
    def by_exam_type_query(cls, exam_type: str, education_level: Optional[str] = None):
        query = cls._listed().where(json_array_contains(cls.exam_types, exam_type))
        if education_level:
            query = query.where(json_array_contains(cls.education_levels, education_level))
        return query.order_by(cls.name)

    def __repr__(self):
        return f"<Subject {self.name} ({self.code})>"

class Topic(Base):
    __tablename__ = "topics"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    subject_id = Column(Uuid, ForeignKey("subjects.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    order_index = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Topic {self.name}>"

class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    subject_id = Column(Uuid, ForeignKey("subjects.id"), nullable=False, index=True)
    topic_id = Column(Uuid, ForeignKey("topics.id"), nullable=True, index=True)
    subject_type = Column(String(30), nullable=False)  # mathematics, physics, history, ...
    content = Column(JSON, default=dict)  # introduction, concepts, exercises, ...
    level = Column(String(30))
    difficulty = Column(String(20), default="beginner", nullable=False)
    duration_minutes = Column(Integer)
    premium_only = Column(Boolean, default=False, nullable=False)
    offline_available = Column(Boolean, default=False, nullable=False)
    interactivity_level = Column(String(20), default="medium")
    created_by = Column(Uuid, ForeignKey("users.id"), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Lesson {self.title} ({self.subject_type})>"

class Question(Base):
    __tablename__ = "questions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    content = Column(Text, nullable=False)
    format = Column(String(30), nullable=False)  # multiple_choice, true_false, short_answer, essay, fill_blank
    options = Column(JSON, default=list)  # [{"text": ..., "is_correct": ...}]
    correct_answer = Column(Text)
    explanation = Column(Text)
    difficulty = Column(String(20), default="intermediate", nullable=False)
    points = Column(Integer, default=1, nullable=False)
    subject_id = Column(Uuid, ForeignKey("subjects.id"), nullable=False, index=True)
    topic_id = Column(Uuid, ForeignKey("topics.id"), nullable=True, index=True)
    tags = Column(JSON, default=list)
    created_by = Column(Uuid, ForeignKey("users.id"), nullable=False)

    # Verification (one-way)
    is_verified = Column(Boolean, default=False, nullable=False)
    verifier_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    quality_score = Column(Float)
    feedback = Column(Text)
    verified_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def verification(self) -> dict:
        return {
            "verified": self.is_verified,
            "verifier_id": self.verifier_id,
            "quality_score": self.quality_score,
            "feedback": self.feedback,
            "verified_at": self.verified_at,
        }

    def __repr__(self):
        return f"<Question {self.id} ({self.difficulty})>"
