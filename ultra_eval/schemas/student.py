# ultra_eval/schemas/student.py
from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime

from ultra_eval.schemas.report import ReportPublic


class StudentBase(BaseModel):
    email: EmailStr
    name: str
    school: str | None = None
    grade: str | None = None
    avatar_url: str | None = None


class StudentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    school: str | None = Field(default=None, max_length=255)
    grade: str | None = Field(default=None, max_length=50)
    avatar_url: str | None = Field(default=None, max_length=1024)

    @field_validator("name")
    @classmethod
    def _name_not_null(cls, v: str | None) -> str:
        # omitted leaves the name as is; null is never stored
        if v is None:
            raise ValueError("name cannot be null")
        return v


class StudentPublic(StudentBase):
    id: str
    elo: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class StudentDetail(StudentPublic):
    """Student plus their reports, newest first."""
    reports: list[ReportPublic] = []


class EloOverride(BaseModel):
    elo: int = Field(ge=0)


class LeaderboardEntry(BaseModel):
    rank: int
    id: str
    name: str
    email: EmailStr
    school: str | None = None
    grade: str | None = None
    avatar_url: str | None = None
    elo: int


class Dashboard(BaseModel):
    student: StudentPublic
    elo: int
    total_reports: int
    rank: int
    recent_reports: list[ReportPublic]
