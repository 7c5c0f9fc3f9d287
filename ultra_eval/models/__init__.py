# ultra_eval/models/__init__.py
from ultra_eval.db.base import Base  # noqa
from ultra_eval.models.student import Student
from ultra_eval.models.report import Report, ReportCategory, ReportStatus

__all__ = ["Base", "Student", "Report", "ReportCategory", "ReportStatus"]
