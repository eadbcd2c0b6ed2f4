"""
Job Repository - job postings with live application counts

Every read attaches ``applications_count`` computed by a correlated
COUNT over applications, so the figure always reflects live rows.

Listing:
    open jobs only → optional literal title match → newest first →
    1-indexed page of ``page_size`` (default 9)

    total_pages = ceil(total_matching / page_size)
    A page past the end (however large) returns no jobs without querying
    for them, but still reports total_pages and the requested page.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ats.errors import NotFound, ValidationError
from ats.models import Application, Job
from ats.services.applications import ApplicationRepository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 9
REQUIRED_FIELDS = ("title", "department", "location")


def count_pages(total: int, page_size: int) -> int:
    """Ceiling division of total by page_size."""
    if page_size <= 0:
        raise ValidationError("Page size must be positive")
    return (total + page_size - 1) // page_size


def applications_count_column():
    return (
        select(func.count(Application.id))
        .where(Application.job_id == Job.id)
        .correlate(Job)
        .scalar_subquery()
        .label("applications_count")
    )


@dataclass
class JobPage:
    jobs: List[Job] = field(default_factory=list)
    total_pages: int = 0
    current_page: int = 1


class JobRepository:
    def __init__(self, db: AsyncSession, applications: ApplicationRepository):
        self.db = db
        self.applications = applications

    @staticmethod
    def _with_count(job: Job, count: int) -> Job:
        job.applications_count = count or 0
        return job

    @staticmethod
    def _validate(fields: dict) -> dict:
        cleaned = {}
        missing = []
        for name in REQUIRED_FIELDS:
            value = fields.get(name)
            if not isinstance(value, str) or not value.strip():
                missing.append(name)
            else:
                cleaned[name] = value.strip()
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        cleaned["is_open"] = bool(fields.get("is_open", True))
        return cleaned

    async def _get_row(self, job_id: str) -> Job:
        result = await self.db.execute(select(Job).where(Job.id == job_id))
        job = result.scalar_one_or_none()
        if not job:
            raise NotFound("Job not found")
        return job

    async def _count_applications(self, job_id: str) -> int:
        result = await self.db.execute(
            select(func.count(Application.id)).where(Application.job_id == job_id)
        )
        return result.scalar() or 0

    # ==================== Queries ====================

    async def list_open_jobs(
        self,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> JobPage:
        """
        Paginated search over open jobs.

        Args:
            search: Case-insensitive literal substring of the title;
                wildcard characters are escaped, so "C++" or "50%" match
                literally
            page: 1-indexed page number
            page_size: Jobs per page
        """
        if page < 1:
            raise ValidationError("Page must be 1 or greater")

        criteria = [Job.is_open.is_(True)]
        if search:
            criteria.append(Job.title.icontains(search, autoescape=True))

        total_result = await self.db.execute(select(func.count(Job.id)).where(*criteria))
        total = total_result.scalar() or 0
        total_pages = count_pages(total, page_size)

        offset = (page - 1) * page_size
        if offset >= total:
            return JobPage(jobs=[], total_pages=total_pages, current_page=page)

        # offset < total here, so both bounds fit the database's integer type
        query = (
            select(Job, applications_count_column())
            .where(*criteria)
            .order_by(Job.created_at.desc(), Job.id.desc())
            .offset(offset)
            .limit(min(page_size, total - offset))
        )
        result = await self.db.execute(query)
        jobs = [self._with_count(job, count) for job, count in result.all()]

        return JobPage(jobs=jobs, total_pages=total_pages, current_page=page)

    async def get_job(self, job_id: str) -> Job:
        result = await self.db.execute(
            select(Job, applications_count_column()).where(Job.id == job_id)
        )
        row = result.first()
        if not row:
            raise NotFound("Job not found")
        job, count = row
        return self._with_count(job, count)

    # ==================== Mutations ====================

    async def create_job(
        self,
        title: str,
        department: str,
        location: str,
        is_open: bool = True,
    ) -> Job:
        fields = self._validate(
            {"title": title, "department": department, "location": location, "is_open": is_open}
        )
        job = Job(**fields)
        job.touch()
        self.db.add(job)
        await self.db.commit()
        await self.db.refresh(job)
        return self._with_count(job, 0)

    async def update_job(self, job_id: str, **fields) -> Job:
        """Replace title, department, location and is_open."""
        cleaned = self._validate(fields)
        job = await self._get_row(job_id)

        job.touch()
        for name, value in cleaned.items():
            setattr(job, name, value)

        await self.db.commit()
        await self.db.refresh(job)
        return self._with_count(job, await self._count_applications(job_id))

    async def delete_job(self, job_id: str) -> int:
        """
        Delete a job and everything it owns.

        Returns:
            Number of applications removed with it
        """
        job = await self._get_row(job_id)

        removed = await self.applications.delete_all_for_job(job_id)
        await self.db.delete(job)
        await self.db.commit()

        logger.info(f"Deleted job {job_id} with {removed} applications")
        return removed
