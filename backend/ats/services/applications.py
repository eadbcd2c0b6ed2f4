"""
Application Repository - candidate applications scoped to a job

Lifecycle:
    create   store CV in the file store, then insert the row
    set_stage single UPDATE scoped to (job_id, id), any stage to any stage
    delete   best-effort CV delete, then delete the row
    delete_all_for_job (job cascade) one CV delete attempt per application,
             then a bulk row delete

File cleanup is best effort everywhere: failures are logged and counted,
never allowed to abort the database mutation.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ats.errors import NotFound, ValidationError
from ats.middleware.metrics import record_cleanup_failure
from ats.models import Application, Job, Stage
from ats.services.file_store import FileStore

logger = logging.getLogger(__name__)


def parse_stage(value: str) -> Stage:
    """Map a wire value to a Stage, raising ValidationError when unknown."""
    try:
        return Stage(value)
    except ValueError:
        allowed = ", ".join(s.value for s in Stage)
        raise ValidationError(f"Invalid stage '{value}'. Allowed: {allowed}")


class ApplicationRepository:
    def __init__(self, db: AsyncSession, files: FileStore):
        self.db = db
        self.files = files

    async def _discard_file(self, locator: str) -> bool:
        """Delete a CV, downgrading any failure to a logged warning."""
        try:
            await self.files.delete(locator)
            return True
        except Exception as e:
            record_cleanup_failure()
            logger.warning(f"Error deleting file {locator}: {e}")
            return False

    async def _job_exists(self, job_id: str) -> bool:
        result = await self.db.execute(select(Job.id).where(Job.id == job_id))
        return result.scalar_one_or_none() is not None

    # ==================== Queries ====================

    async def list_applications(
        self,
        job_id: str,
        search: Optional[str] = None,
        stage: Optional[str] = None,
    ) -> List[Application]:
        """
        Applications of one job.

        Args:
            job_id: Owning job
            search: Case-insensitive literal substring of name, email or phone
            stage: Exact stage filter
        """
        query = select(Application).where(Application.job_id == job_id)

        if search:
            query = query.where(
                or_(
                    Application.name.icontains(search, autoescape=True),
                    Application.email.icontains(search, autoescape=True),
                    Application.phone.icontains(search, autoescape=True),
                )
            )

        if stage:
            query = query.where(Application.stage == parse_stage(stage).value)

        query = query.order_by(Application.created_at.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_application(self, job_id: str, application_id: str) -> Application:
        result = await self.db.execute(
            select(Application).where(
                Application.id == application_id,
                Application.job_id == job_id,
            )
        )
        application = result.scalar_one_or_none()
        if not application:
            raise NotFound("Application not found")
        return application

    # ==================== Mutations ====================

    async def create_application(
        self,
        job_id: str,
        name: str,
        email: str,
        phone: str,
        cv_data: Optional[bytes],
        cv_filename: Optional[str] = None,
        stage: Optional[str] = None,
    ) -> Application:
        """
        Store the CV, then insert the application row.

        Raises:
            ValidationError: Missing/empty CV, blank contact field, unknown stage
            NotFound: The job does not exist
        """
        if not cv_data:
            raise ValidationError("CV file is required")

        fields = {"name": name, "email": email, "phone": phone}
        missing = [key for key, value in fields.items() if not value or not value.strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        resolved_stage = parse_stage(stage) if stage else Stage.APPLIED

        if not await self._job_exists(job_id):
            raise NotFound("Job not found")

        cv_url = await self.files.store(cv_data, cv_filename or "")

        application = Application(
            name=name.strip(),
            email=email.strip(),
            phone=phone.strip(),
            cv_url=cv_url,
            stage=resolved_stage.value,
            job_id=job_id,
        )
        application.touch()
        self.db.add(application)
        try:
            await self.db.commit()
        except IntegrityError:
            # The job was deleted between the existence check and the insert
            await self.db.rollback()
            await self._discard_file(cv_url)
            raise NotFound("Job not found")
        except Exception:
            await self.db.rollback()
            await self._discard_file(cv_url)
            raise

        await self.db.refresh(application)
        return application

    async def set_stage(self, job_id: str, application_id: str, stage: str) -> Application:
        """Move an application to any stage; concurrent updates are last-write-wins."""
        new_stage = parse_stage(stage)

        result = await self.db.execute(
            update(Application)
            .where(Application.id == application_id, Application.job_id == job_id)
            .values(stage=new_stage.value, **Application.touched_values())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFound("Application not found")
        await self.db.commit()

        application = await self.get_application(job_id, application_id)
        await self.db.refresh(application)
        return application

    async def delete_application(self, job_id: str, application_id: str) -> None:
        application = await self.get_application(job_id, application_id)

        if application.cv_url:
            await self._discard_file(application.cv_url)

        await self.db.execute(
            delete(Application).where(
                Application.id == application_id,
                Application.job_id == job_id,
            )
        )
        await self.db.commit()

    async def delete_all_for_job(self, job_id: str) -> int:
        """
        Cascade step of job deletion.

        Attempts one CV delete per application regardless of earlier
        failures, then removes every application row of the job. The
        caller owns the transaction and must commit.

        Returns:
            Number of application rows deleted
        """
        result = await self.db.execute(
            select(Application.id, Application.cv_url).where(Application.job_id == job_id)
        )
        rows = result.all()

        for _, cv_url in rows:
            if cv_url:
                await self._discard_file(cv_url)

        deleted = await self.db.execute(
            delete(Application)
            .where(Application.job_id == job_id)
            .execution_options(synchronize_session=False)
        )
        logger.info(f"Deleted {deleted.rowcount} applications of job {job_id}")
        return deleted.rowcount
