from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ats.database import get_db
from ats.schemas import ApplicationResponse, MessageResponse, StageUpdate
from ats.services.applications import ApplicationRepository
from ats.services.file_store import FileStore, get_file_store

router = APIRouter()


def get_application_repository(
    db: AsyncSession = Depends(get_db),
    files: FileStore = Depends(get_file_store),
) -> ApplicationRepository:
    return ApplicationRepository(db, files)


@router.get("", response_model=List[ApplicationResponse])
async def list_applications(
    job_id: str,
    search: Optional[str] = Query(None),
    stage: Optional[str] = Query(None),
    applications: ApplicationRepository = Depends(get_application_repository),
):
    results = await applications.list_applications(job_id, search=search, stage=stage)
    return [ApplicationResponse.model_validate(a) for a in results]


@router.post("", response_model=ApplicationResponse, status_code=201)
async def create_application(
    job_id: str,
    name: str = Form(...),
    email: str = Form(...),
    phone: str = Form(...),
    stage: Optional[str] = Form(None),
    cv: Optional[UploadFile] = File(None),
    applications: ApplicationRepository = Depends(get_application_repository),
):
    cv_data = await cv.read() if cv is not None else None
    application = await applications.create_application(
        job_id,
        name=name,
        email=email,
        phone=phone,
        cv_data=cv_data,
        cv_filename=cv.filename if cv is not None else None,
        stage=stage,
    )
    return ApplicationResponse.model_validate(application)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    job_id: str,
    application_id: str,
    applications: ApplicationRepository = Depends(get_application_repository),
):
    return ApplicationResponse.model_validate(
        await applications.get_application(job_id, application_id)
    )


@router.patch("/{application_id}/stage", response_model=ApplicationResponse)
async def set_stage(
    job_id: str,
    application_id: str,
    update: StageUpdate,
    applications: ApplicationRepository = Depends(get_application_repository),
):
    application = await applications.set_stage(job_id, application_id, update.stage.value)
    return ApplicationResponse.model_validate(application)


@router.delete("/{application_id}", response_model=MessageResponse)
async def delete_application(
    job_id: str,
    application_id: str,
    applications: ApplicationRepository = Depends(get_application_repository),
):
    await applications.delete_application(job_id, application_id)
    return MessageResponse(message="Application and associated CV deleted successfully")
