from datetime import datetime
from enum import Enum
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class ResourceStream(str, Enum):
    DATA_SCIENCE = "Data Science"
    DATA_ANALYTICS = "Data Analytics"
    POWER_BI = "Power BI"
    EXCEL = "Excel"
    SQL = "SQL"
    AI_ML = "AI/ML"
    PYTHON = "Python"
    JAVASCRIPT = "JavaScript"
    REACT = "React"
    OTHER = "Other"


class ResourceCreate(BaseModel):
    title: str = Field(..., min_length=1)
    url: HttpUrl
    stream: ResourceStream


class ResourceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    url: str
    stream: ResourceStream
    created_at: datetime
    added_by: UUID | None = None
