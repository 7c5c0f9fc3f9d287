# ultra_eval/services/admin_service.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from ultra_eval.models.report import Report
from ultra_eval.models.student import Student
from ultra_eval.schemas.report import ReportAdminUpdate

logger = logging.getLogger(__name__)


def get_report(db: Session, report_id: str) -> Optional[Report]:
    return db.get(Report, report_id)


def override_student_elo(
    db: Session,
    *,
    student: Student,
    elo: int,
    admin_email: str,
) -> Student:
    """
    Admin sets the balance absolutely. After this, elo no longer equals the
    sum of the student's report awards.
    """
    old_elo = student.elo
    student.elo = elo
    student.updated_at = datetime.now(timezone.utc)

    db.add(student)
    db.commit()
    db.refresh(student)
    logger.info(f"Admin {admin_email} set elo for student {student.id}: {old_elo} -> {elo}")
    return student


def admin_update_report(
    db: Session,
    *,
    report: Report,
    obj_in: ReportAdminUpdate,
    admin_email: str,
) -> Report:
    """
    Admin edits a report's fields directly. The student's balance is not
    recomputed; use override_student_elo for that.
    """
    update_data = obj_in.model_dump(exclude_unset=True, exclude_none=True)
    if "status" in update_data:
        update_data["status"] = update_data["status"].value
    for field, value in update_data.items():
        setattr(report, field, value)
    report.graded_at = datetime.now(timezone.utc)

    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info(f"Admin {admin_email} updated report {report.id}: {sorted(update_data)}")
    return report
