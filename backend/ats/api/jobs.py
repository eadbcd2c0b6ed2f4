from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ats.config import Settings, get_app_settings
from ats.database import get_db
from ats.schemas import JobCreate, JobListResponse, JobResponse, JobUpdate, MessageResponse
from ats.services.applications import ApplicationRepository
from ats.services.file_store import FileStore, get_file_store
from ats.services.jobs import JobRepository

router = APIRouter()


def get_job_repository(
    db: AsyncSession = Depends(get_db),
    files: FileStore = Depends(get_file_store),
) -> JobRepository:
    return JobRepository(db, ApplicationRepository(db, files))


@router.get("", response_model=JobListResponse)
async def list_jobs(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    jobs: JobRepository = Depends(get_job_repository),
    settings: Settings = Depends(get_app_settings),
):
    result = await jobs.list_open_jobs(
        search=search,
        page=page,
        page_size=limit or settings.default_page_size,
    )
    return JobListResponse(
        jobs=[JobResponse.model_validate(job) for job in result.jobs],
        total_pages=result.total_pages,
        current_page=result.current_page,
    )


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: str, jobs: JobRepository = Depends(get_job_repository)):
    return JobResponse.model_validate(await jobs.get_job(job_id))


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(job: JobCreate, jobs: JobRepository = Depends(get_job_repository)):
    created = await jobs.create_job(
        title=job.title,
        department=job.department,
        location=job.location,
        is_open=job.is_open,
    )
    return JobResponse.model_validate(created)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: str,
    update: JobUpdate,
    jobs: JobRepository = Depends(get_job_repository),
):
    updated = await jobs.update_job(job_id, **update.model_dump())
    return JobResponse.model_validate(updated)


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: str, jobs: JobRepository = Depends(get_job_repository)):
    await jobs.delete_job(job_id)
    return MessageResponse(message="Job and associated applications deleted successfully")
