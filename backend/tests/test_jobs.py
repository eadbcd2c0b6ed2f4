"""
Tests for the Job Repository

Tests cover:
- Page arithmetic (total_pages = ceil(n / p))
- Open-only listing, newest first, default page size 9
- Literal title search (regex / LIKE metacharacters)
- Live applications_count
- Create/update validation and NotFound
- Cascading delete with best-effort file cleanup
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import func, select

from ats.errors import NotFound, ValidationError
from ats.models import Application
from ats.services.applications import ApplicationRepository
from ats.services.file_store import FileStore
from ats.services.jobs import DEFAULT_PAGE_SIZE, JobRepository, count_pages

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def jobs(db_session, file_store):
    return JobRepository(db_session, ApplicationRepository(db_session, file_store))


@pytest.fixture
def mock_files():
    """File store double whose deletes can be made to fail."""
    files = MagicMock(spec=FileStore)
    counter = {"n": 0}

    def _store(data, filename):
        counter["n"] += 1
        return f"/uploads/cv-{counter['n']}.pdf"

    files.store = AsyncMock(side_effect=_store)
    files.delete = AsyncMock(return_value=True)
    return files


async def add_job(jobs, db_session, title, minutes=0, is_open=True):
    """Create a job whose created_at is BASE_TIME + minutes."""
    job = await jobs.create_job(title, "Engineering", "Remote", is_open)
    job.created_at = BASE_TIME + timedelta(minutes=minutes)
    await db_session.commit()
    return job


class TestCountPages:
    @pytest.mark.parametrize(
        "total,page_size,expected",
        [(0, 9, 0), (1, 9, 1), (9, 9, 1), (10, 9, 2), (18, 9, 2), (19, 9, 3), (5, 1, 5), (7, 100, 1)],
    )
    def test_ceiling(self, total, page_size, expected):
        assert count_pages(total, page_size) == expected

    def test_non_positive_page_size(self):
        with pytest.raises(ValidationError):
            count_pages(10, 0)


class TestListOpenJobs:
    @pytest.mark.asyncio
    async def test_only_open_jobs_newest_first(self, jobs, db_session):
        await add_job(jobs, db_session, "Oldest", minutes=0)
        await add_job(jobs, db_session, "Closed", minutes=5, is_open=False)
        await add_job(jobs, db_session, "Newest", minutes=10)
        await add_job(jobs, db_session, "Middle", minutes=3)

        page = await jobs.list_open_jobs()

        assert [job.title for job in page.jobs] == ["Newest", "Middle", "Oldest"]
        assert page.total_pages == 1
        assert page.current_page == 1

    @pytest.mark.asyncio
    async def test_default_page_size_is_nine(self, jobs, db_session):
        for i in range(11):
            await add_job(jobs, db_session, f"Job {i}", minutes=i)

        first = await jobs.list_open_jobs()
        second = await jobs.list_open_jobs(page=2)

        assert DEFAULT_PAGE_SIZE == 9
        assert len(first.jobs) == 9
        assert first.total_pages == 2
        assert [job.title for job in second.jobs] == ["Job 1", "Job 0"]
        assert second.current_page == 2

    @pytest.mark.asyncio
    async def test_page_past_the_end(self, jobs, db_session):
        for i in range(3):
            await add_job(jobs, db_session, f"Job {i}", minutes=i)

        page = await jobs.list_open_jobs(page=5, page_size=2)

        assert page.jobs == []
        assert page.total_pages == 2
        assert page.current_page == 5

    @pytest.mark.asyncio
    async def test_huge_page_and_limit(self, jobs, db_session):
        for i in range(3):
            await add_job(jobs, db_session, f"Job {i}", minutes=i)

        far = await jobs.list_open_jobs(page=10**19)
        wide = await jobs.list_open_jobs(page_size=10**19)
        both = await jobs.list_open_jobs(page=2**63, page_size=2**63)

        assert far.jobs == []
        assert far.total_pages == 1
        assert far.current_page == 10**19
        assert [job.title for job in wide.jobs] == ["Job 2", "Job 1", "Job 0"]
        assert wide.total_pages == 1
        assert both.jobs == []
        assert both.current_page == 2**63

    @pytest.mark.asyncio
    async def test_no_matches(self, jobs):
        page = await jobs.list_open_jobs(search="anything")

        assert page.jobs == []
        assert page.total_pages == 0
        assert page.current_page == 1

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_substring(self, jobs, db_session):
        await add_job(jobs, db_session, "Backend Developer", minutes=1)
        await add_job(jobs, db_session, "Frontend Developer", minutes=2)
        await add_job(jobs, db_session, "UX Designer", minutes=3)

        page = await jobs.list_open_jobs(search="DEVELOP")

        assert [job.title for job in page.jobs] == ["Frontend Developer", "Backend Developer"]

    @pytest.mark.asyncio
    async def test_search_metacharacters_match_literally(self, jobs, db_session):
        await add_job(jobs, db_session, "C++ Engineer", minutes=1)
        await add_job(jobs, db_session, "C Engineer", minutes=2)
        await add_job(jobs, db_session, "Growth 100% Remote", minutes=3)
        await add_job(jobs, db_session, "Growth 1000 Remote", minutes=4)
        await add_job(jobs, db_session, "data_engineer", minutes=5)
        await add_job(jobs, db_session, "dataXengineer", minutes=6)

        assert [j.title for j in (await jobs.list_open_jobs(search="C++")).jobs] == ["C++ Engineer"]
        assert [j.title for j in (await jobs.list_open_jobs(search="100%")).jobs] == ["Growth 100% Remote"]
        assert [j.title for j in (await jobs.list_open_jobs(search="a_e")).jobs] == ["data_engineer"]
        assert (await jobs.list_open_jobs(search="(.*[")).jobs == []

    @pytest.mark.asyncio
    async def test_applications_count(self, jobs, db_session):
        busy = await add_job(jobs, db_session, "Busy", minutes=1)
        await add_job(jobs, db_session, "Quiet", minutes=2)
        for i in range(3):
            await jobs.applications.create_application(
                busy.id, f"Candidate {i}", f"c{i}@example.com", "555", b"%PDF", "cv.pdf"
            )

        page = await jobs.list_open_jobs()

        counts = {job.title: job.applications_count for job in page.jobs}
        assert counts == {"Busy": 3, "Quiet": 0}


class TestGetJob:
    @pytest.mark.asyncio
    async def test_get_includes_count(self, jobs):
        job = await jobs.create_job("Backend Developer", "Engineering", "Remote", True)

        fetched = await jobs.get_job(job.id)

        assert fetched.title == "Backend Developer"
        assert fetched.applications_count == 0

    @pytest.mark.asyncio
    async def test_get_missing(self, jobs):
        with pytest.raises(NotFound):
            await jobs.get_job("missing")


class TestCreateUpdate:
    @pytest.mark.asyncio
    async def test_create_sets_timestamps(self, jobs):
        job = await jobs.create_job("  QA Lead ", "Quality", "Berlin")

        assert job.title == "QA Lead"
        assert job.is_open is True
        assert job.created_at is not None
        assert job.updated_at == job.created_at

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["title", "department", "location"])
    async def test_create_requires_fields(self, jobs, field):
        data = {"title": "T", "department": "D", "location": "L"}
        data[field] = "   "

        with pytest.raises(ValidationError):
            await jobs.create_job(**data)

    @pytest.mark.asyncio
    async def test_update_replaces_fields(self, jobs, db_session):
        job = await add_job(jobs, db_session, "Old title")

        updated = await jobs.update_job(
            job.id, title="New title", department="Design", location="Paris", is_open=False
        )

        assert (updated.title, updated.department, updated.location, updated.is_open) == (
            "New title", "Design", "Paris", False,
        )
        assert updated.created_at == BASE_TIME
        assert updated.updated_at > BASE_TIME

    @pytest.mark.asyncio
    async def test_update_missing(self, jobs):
        with pytest.raises(NotFound):
            await jobs.update_job("missing", title="T", department="D", location="L", is_open=True)


class TestDeleteJob:
    @pytest.mark.asyncio
    async def test_cascade_counts_with_failing_file_deletes(self, db_session, mock_files):
        jobs = JobRepository(db_session, ApplicationRepository(db_session, mock_files))
        doomed = await jobs.create_job("Doomed", "Eng", "Remote")
        survivor = await jobs.create_job("Survivor", "Eng", "Remote")
        for i in range(4):
            await jobs.applications.create_application(doomed.id, f"N{i}", "e@x.com", "1", b"cv", "cv.pdf")
        await jobs.applications.create_application(survivor.id, "S", "s@x.com", "2", b"cv", "cv.pdf")

        mock_files.delete = AsyncMock(side_effect=[OSError("disk"), True, PermissionError("no"), True])

        removed = await jobs.delete_job(doomed.id)

        assert removed == 4
        assert mock_files.delete.await_count == 4
        remaining = await db_session.execute(select(func.count(Application.id)))
        assert remaining.scalar() == 1
        with pytest.raises(NotFound):
            await jobs.get_job(doomed.id)
        assert (await jobs.get_job(survivor.id)).applications_count == 1

    @pytest.mark.asyncio
    async def test_delete_without_applications(self, jobs):
        job = await jobs.create_job("Empty", "Eng", "Remote")

        assert await jobs.delete_job(job.id) == 0

    @pytest.mark.asyncio
    async def test_delete_missing(self, jobs):
        with pytest.raises(NotFound):
            await jobs.delete_job("missing")
