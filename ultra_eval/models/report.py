# ultra_eval/models/report.py
import enum
import uuid

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    JSON,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ultra_eval.db.base import Base


class ReportCategory(str, enum.Enum):
    accomplishment = "accomplishment"
    award = "award"
    impact = "impact"
    todo = "todo"


class ReportStatus(str, enum.Enum):
    pending = "pending"
    graded = "graded"
    rejected = "rejected"


class Report(Base):
    __tablename__ = "reports"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    student_id = Column(String(36), ForeignKey("students.id"), nullable=False, index=True)

    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(20), nullable=False)
    file_urls = Column(JSON, nullable=False, default=list)

    # evaluation output
    elo_awarded = Column(Integer, nullable=False, default=0)
    ai_feedback = Column(Text, nullable=True)
    analysis_parts = Column(JSON, nullable=True)
    # {"impact": 0-10, "productivity": 0-10, "quality": 0-10, "relevance": 0-10}
    category_score = Column(JSON, nullable=True)

    # pending / graded / rejected
    status = Column(String(20), nullable=False, default=ReportStatus.pending.value, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    graded_at = Column(DateTime(timezone=True), nullable=True)

    student = relationship("Student", back_populates="reports")
