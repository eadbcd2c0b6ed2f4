from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ats.models import Stage


class StageUpdate(BaseModel):
    stage: Stage


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True, alias_generator=to_camel)

    id: str
    name: str
    email: str
    phone: str
    cv_url: str
    stage: Stage
    job_id: str = Field(..., alias="job")
    created_at: datetime
    updated_at: datetime
