"""Sample data for an empty database."""

import logging

from jobboard.core.security import Role, get_password_hash
from jobboard.models.job import JobType, WorkLocation
from jobboard.services.job_store import JobStore
from jobboard.services.user_store import UserStore

logger = logging.getLogger(__name__)

SAMPLE_USERS = [
    {
        "name": {"first": "Admin", "middle": "", "last": "User"},
        "email": "admin@jobfinder.com",
        "password": "Admin1234!",
        "role": Role.ADMIN,
        "profession": "System Administrator",
        "bio": "JobFinder platform administrator",
    },
    {
        "name": {"first": "John", "middle": "", "last": "Recruiter"},
        "email": "recruiter@example.com",
        "password": "Recruiter1234!",
        "role": Role.RECRUITER,
        "profession": "HR Manager",
        "bio": "Experienced HR manager looking for talented individuals",
    },
    {
        "name": {"first": "Jane", "middle": "", "last": "JobSeeker"},
        "email": "jobseeker@example.com",
        "password": "Seeker1234!",
        "role": Role.JOBSEEKER,
        "profession": "Software Developer",
        "bio": "Experienced software developer looking for new opportunities",
    },
]

# "poster" indexes into SAMPLE_USERS
SAMPLE_JOBS = [
    {
        "poster": 1,
        "title": "Frontend Developer",
        "company": "Tech Solutions Inc.",
        "description": "We are looking for a skilled Frontend Developer to join our team. "
                       "The ideal candidate should have experience with JavaScript, React, and CSS.",
        "requirements": "At least 2 years of experience with React and modern JavaScript. "
                        "Knowledge of responsive design and CSS preprocessors.",
        "location": "Tel Aviv, Israel",
        "salary": "$80,000 - $100,000",
        "job_type": JobType.FULL_TIME.value,
        "contact_email": "jobs@techsolutions.com",
    },
    {
        "poster": 1,
        "title": "Backend Developer",
        "company": "Tech Solutions Inc.",
        "description": "We are seeking a Backend Developer to build and maintain our server-side applications and APIs.",
        "requirements": "Experience with Python web frameworks. Knowledge of MongoDB or other NoSQL databases. "
                        "Understanding of RESTful APIs.",
        "location": "Jerusalem, Israel",
        "salary": "$85,000 - $110,000",
        "job_type": JobType.FULL_TIME.value,
        "contact_email": "jobs@techsolutions.com",
    },
    {
        "poster": 0,
        "title": "UX/UI Designer",
        "company": "Creative Minds",
        "description": "Join our design team to create exceptional user experiences for web and mobile applications.",
        "requirements": "Portfolio showcasing UI/UX projects. Proficiency with design tools (Figma, Sketch).",
        "location": "Remote",
        "salary": "$70,000 - $90,000",
        "job_type": JobType.CONTRACT.value,
        "work_location": WorkLocation.REMOTE.value,
        "contact_email": "careers@creativeminds.com",
    },
]


async def seed_database(users: UserStore, jobs: JobStore) -> bool:
    """
    Insert sample users and jobs when the users collection is empty.

    Returns:
        bool: True if data was inserted
    """
    if await users.count() > 0:
        logger.info("Database already contains users, skipping seed")
        return False

    logger.info("No users found, seeding database with sample data...")
    created = []
    for sample in SAMPLE_USERS:
        created.append(
            await users.create(
                name=sample["name"],
                email=sample["email"],
                password_hash=get_password_hash(sample["password"]),
                role=sample["role"],
                bio=sample["bio"],
                profession=sample["profession"],
            )
        )

    for sample in SAMPLE_JOBS:
        data = {key: value for key, value in sample.items() if key != "poster"}
        await jobs.create(data, created[sample["poster"]]["_id"])

    logger.info(f"✅ Seeded {len(created)} users and {len(SAMPLE_JOBS)} jobs")
    return True
