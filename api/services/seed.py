"""Sample data for a fresh simulator database."""

import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from api.services.jobs import slugify
from core.models import VALID_STAGES
from database.models.records import CandidateRecord, JobRecord

logger = logging.getLogger(__name__)

JOB_TITLES = [
    "Senior Frontend Developer",
    "Full Stack Engineer",
    "React Developer",
    "Node.js Developer",
    "Python Developer",
    "Junior Frontend Developer",
    "DevOps Engineer",
    "Data Analyst",
    "Product Manager",
    "UX Designer",
    "QA Engineer",
    "Mobile Developer",
    "Engineering Manager",
    "Security Specialist",
    "Technical Writer",
    "Graduate Software Engineer",
    "Cloud Architect",
    "Machine Learning Engineer",
    "Support Engineer",
    "Head of Talent",
]

TAGS = [
    "React", "JavaScript", "Node.js", "Python", "AWS", "Docker", "Kubernetes",
    "MongoDB", "PostgreSQL", "Redis", "GraphQL", "TypeScript", "Vue.js",
    "Angular", "Express", "Django", "Flask", "FastAPI", "Terraform",
    "Jenkins", "GitLab", "GitHub", "Jira", "Figma",
]

FIRST_NAMES = [
    "John", "Jane", "Michael", "Sarah", "David", "Emily", "Robert", "Jessica",
    "William", "Ashley", "James", "Amanda", "Christopher", "Jennifer", "Daniel",
    "Lisa", "Matthew", "Nancy", "Anthony", "Karen", "Mark", "Helen", "Steven",
]

LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Rodriguez", "Martinez", "Wilson", "Anderson", "Thomas", "Taylor", "Moore",
    "Jackson", "Martin", "Lee", "Thompson", "White", "Harris", "Clark", "Lewis",
]

EXPERIENCE_KEYWORDS = (
    "senior", "lead", "principal", "architect", "director", "manager", "head",
    "chief", "expert", "specialist", "consultant",
)
FRESHER_KEYWORDS = ("junior", "graduate", "intern", "trainee", "entry", "support")
TECHNICAL_KEYWORDS = ("engineer", "developer", "analyst")


def categorize_experience(title: str, rng: random.Random) -> str:
    """``Experience`` or ``Fresher`` from keywords; technical roles are mixed."""
    lowered = title.lower()
    if any(keyword in lowered for keyword in EXPERIENCE_KEYWORDS):
        return "Experience"
    if any(keyword in lowered for keyword in FRESHER_KEYWORDS):
        return "Fresher"
    if any(keyword in lowered for keyword in TECHNICAL_KEYWORDS):
        return "Experience" if rng.random() > 0.4 else "Fresher"
    return "Experience"


def generate_jobs(count: int, rng: random.Random, now: datetime) -> list[JobRecord]:
    jobs = []
    for index in range(count):
        title = JOB_TITLES[index % len(JOB_TITLES)]
        round_number = index // len(JOB_TITLES)
        if round_number:
            title = f"{title} {round_number + 1}"
        jobs.append(
            JobRecord(
                id=f"job-{index + 1}",
                title=title,
                slug=slugify(title),
                description=f"We are hiring a {title}.",
                status="active" if rng.random() > 0.3 else "archived",
                tags=rng.sample(TAGS, rng.randint(2, 6)),
                order=index + 1,
                experience_level=categorize_experience(title, rng),
                location=rng.choice(["Remote", "Bengaluru", "Berlin", "New York"]),
                salary="",
                requirements=[],
                responsibilities=[],
                created_at=now - timedelta(days=rng.uniform(0, 30)),
                updated_at=now,
            )
        )
    return jobs


def generate_candidates(
    count: int,
    jobs: list[JobRecord],
    rng: random.Random,
    now: datetime,
) -> list[CandidateRecord]:
    candidates = []
    for index in range(count):
        first_name = rng.choice(FIRST_NAMES)
        last_name = rng.choice(LAST_NAMES)
        candidates.append(
            CandidateRecord(
                id=f"candidate-{index + 1}",
                name=f"{first_name} {last_name}",
                email=f"{first_name.lower()}.{last_name.lower()}{index + 1}@email.com",
                stage=rng.choice(VALID_STAGES),
                job_id=rng.choice(jobs).id if jobs else None,
                created_at=now - timedelta(days=rng.uniform(0, 60)),
                updated_at=now,
            )
        )
    return candidates


async def seed_database(
    session_factory: async_sessionmaker[AsyncSession],
    job_count: int,
    candidate_count: int,
    seed: Optional[int] = None,
) -> bool:
    """
    Populate an empty database.

    Returns:
        False when jobs already exist and nothing was written
    """
    async with session_factory() as session:
        existing = (await session.execute(select(func.count(JobRecord.id)))).scalar() or 0
        if existing:
            logger.info(f"Database already seeded with {existing} jobs")
            return False

        rng = random.Random(seed)
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        jobs = generate_jobs(job_count, rng, now)
        candidates = generate_candidates(candidate_count, jobs, rng, now)

        session.add_all(jobs)
        session.add_all(candidates)
        await session.commit()

    logger.info(f"Seeded {len(jobs)} jobs and {len(candidates)} candidates")
    return True
