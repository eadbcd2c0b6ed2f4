#!/usr/bin/env python3
"""
Sample Job Seeder

Inserts a handful of job postings for local development. One of them is
closed and therefore never appears in the job listing.

Usage:
    python scripts/seed_jobs.py
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from ats.config import get_settings
from ats.database import Database
from ats.services.applications import ApplicationRepository
from ats.services.file_store import FileStore
from ats.services.jobs import JobRepository

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

SAMPLE_JOBS = [
    {"title": "Frontend Developer", "department": "Engineering", "location": "Remote", "is_open": True},
    {"title": "Backend Developer", "department": "Engineering", "location": "New York", "is_open": True},
    {"title": "UX Designer", "department": "Design", "location": "San Francisco", "is_open": True},
    # Closed: hidden from the job listing
    {"title": "Product Manager", "department": "Product", "location": "London", "is_open": False},
]


async def main() -> None:
    settings = get_settings()
    database = Database(settings.database_url)
    await database.create_all()

    try:
        async with database.session() as session:
            jobs = JobRepository(session, ApplicationRepository(session, FileStore(settings.upload_dir)))
            for data in SAMPLE_JOBS:
                job = await jobs.create_job(**data)
                logger.info(f"Added job: {job.title} ({'open' if job.is_open else 'closed'})")
    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
