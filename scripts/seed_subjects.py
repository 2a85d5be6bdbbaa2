# ============================================================================
# Seed Curriculum Data
# ============================================================================
"""
Script to seed subjects and topics into the database.

Existing subjects (matched by code) are left untouched, so the script can
be re-run safely.

Usage:
    python scripts/seed_subjects.py
"""

import asyncio
import sys
import os

# Ensure the app directory is in the python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from app.config import get_settings
from app.core.context import AppContext
from app.models.curriculum import Subject, Topic

SECONDARY = ["secondary"]
CAMEROON = ["CM"]

CURRICULUM_DATA = [
    {
        "name": "Mathematics",
        "code": "MATH",
        "category": "mathematics",
        "exam_types": ["BEPC", "PROBATOIRE", "BAC"],
        "series": ["C", "D"],
        "is_featured": True,
        "color": "#1E88E5",
        "topics": ["Numbers and Operations", "Algebra", "Functions", "Geometry", "Probability and Statistics"],
    },
    {
        "name": "Physics",
        "code": "PHY",
        "category": "sciences",
        "exam_types": ["PROBATOIRE", "BAC"],
        "series": ["C", "D"],
        "is_featured": True,
        "color": "#8E24AA",
        "topics": ["Mechanics", "Electricity", "Waves and Optics", "Thermodynamics"],
    },
    {
        "name": "Chemistry",
        "code": "CHEM",
        "category": "sciences",
        "exam_types": ["PROBATOIRE", "BAC"],
        "series": ["C", "D"],
        "color": "#43A047",
        "topics": ["Atomic Structure", "Chemical Bonding", "Organic Chemistry", "Acids and Bases"],
    },
    {
        "name": "Biology",
        "code": "BIO",
        "category": "sciences",
        "exam_types": ["BEPC", "BAC"],
        "series": ["D"],
        "color": "#00897B",
        "topics": ["Cell Biology", "Genetics", "Human Physiology", "Ecology"],
    },
    {
        "name": "English Language",
        "code": "ENG",
        "category": "languages",
        "exam_types": ["BEPC", "PROBATOIRE", "BAC"],
        "series": ["A", "C", "D"],
        "color": "#F4511E",
        "topics": ["Reading Comprehension", "Grammar", "Essay Writing", "Literature"],
    },
    {
        "name": "French",
        "code": "FR",
        "category": "languages",
        "exam_types": ["BEPC", "PROBATOIRE", "BAC"],
        "series": ["A", "C", "D"],
        "color": "#3949AB",
        "topics": ["Compréhension de texte", "Grammaire", "Dissertation", "Commentaire composé"],
    },
    {
        "name": "History",
        "code": "HIST",
        "category": "humanities",
        "exam_types": ["BEPC", "BAC"],
        "series": ["A"],
        "color": "#6D4C41",
        "topics": ["Colonial Africa", "Independence Movements", "World Wars", "Cold War"],
    },
    {
        "name": "Geography",
        "code": "GEO",
        "category": "humanities",
        "exam_types": ["BEPC", "BAC"],
        "series": ["A"],
        "color": "#7CB342",
        "topics": ["Physical Geography", "Population", "Economic Geography", "Map Reading"],
    },
    {
        "name": "Philosophy",
        "code": "PHILO",
        "category": "humanities",
        "exam_types": ["BAC"],
        "series": ["A", "C", "D"],
        "color": "#546E7A",
        "topics": ["Knowledge", "Ethics", "Politics", "Logic"],
    },
]

async def seed_curriculum():
    """Insert every subject and its topics that are not there yet"""
    context = AppContext.from_settings(get_settings())
    await context.database.create_all()
    created = 0

    try:
        async with context.database.session() as db:
            for entry in CURRICULUM_DATA:
                data = dict(entry)
                topics = data.pop("topics")

                result = await db.execute(select(Subject).where(Subject.code == data["code"]))
                if result.scalar_one_or_none():
                    print(f"Skipping {data['name']} ({data['code']}): already exists")
                    continue

                subject = Subject(
                    countries=CAMEROON,
                    education_levels=SECONDARY,
                    **data
                )
                db.add(subject)
                await db.flush()

                for index, name in enumerate(topics, start=1):
                    db.add(Topic(subject_id=subject.id, name=name, order_index=index))

                created += 1
                print(f"Added {subject.name} with {len(topics)} topics")

            await db.commit()
    finally:
        await context.database.dispose()

    print(f"Seeding complete: {created} subjects created")

if __name__ == "__main__":
    asyncio.run(seed_curriculum())
