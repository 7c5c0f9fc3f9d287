# ultra_eval/schemas/report.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ultra_eval.models.report import ReportStatus
from ultra_eval.schemas.evaluation import CategoryScore, EvaluationPublic


class ReportSubmit(BaseModel):
    """Body of POST /submit-report.

    Every field is optional here so the service can answer a missing field
    with its own 400 instead of a validation 422.
    """

    title: str | None = None
    description: str | None = None
    category: str | None = None
    student_id: str | None = Field(default=None, alias="studentId")
    file_urls: list[str] | None = Field(default=None, alias="fileUrls")

    model_config = ConfigDict(populate_by_name=True)


class ReportPublic(BaseModel):
    id: str
    student_id: str
    title: str
    description: str
    category: str
    file_urls: list[str] = []
    elo_awarded: int
    ai_feedback: str | None = None
    analysis_parts: list[str] | None = None
    category_score: CategoryScore | None = None
    status: str
    created_at: datetime | None = None
    graded_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ReportAdminUpdate(BaseModel):
    """Admin edit of a single report; only the given fields change."""

    title: str | None = None
    description: str | None = None
    elo_awarded: int | None = Field(default=None, ge=0, le=100)
    ai_feedback: str | None = None
    status: ReportStatus | None = None


class SubmissionResponse(BaseModel):
    success: bool
    report: ReportPublic
    evaluation: EvaluationPublic
    new_elo: int = Field(alias="newElo")

    model_config = ConfigDict(populate_by_name=True)
