# ultra_eval/services/submission_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ultra_eval.models.report import Report, ReportCategory, ReportStatus
from ultra_eval.models.student import Student
from ultra_eval.schemas.evaluation import EvaluationResult
from ultra_eval.schemas.report import ReportSubmit

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "description", "category", "student_id")


class SubmissionError(Exception):
    status_code = 500


class MissingFieldsError(SubmissionError):
    status_code = 400


class InvalidCategoryError(SubmissionError):
    status_code = 400


class StudentNotFoundError(SubmissionError):
    status_code = 404


class ReportPersistError(SubmissionError):
    status_code = 500


@dataclass
class SubmissionOutcome:
    """Result of one submission.

    ``warnings`` lists the non-fatal steps that did not go through (degraded
    evaluation, balance update, notification); the report exists either way.
    """

    report: Report
    evaluation: EvaluationResult
    new_elo: int
    warnings: list[str] = field(default_factory=list)
    success: bool = True


def _validate(obj_in: ReportSubmit) -> None:
    missing = [
        name for name in REQUIRED_FIELDS
        if not (getattr(obj_in, name) or "").strip()
    ]
    if missing:
        raise MissingFieldsError("Missing required fields")

    valid = {c.value for c in ReportCategory}
    if obj_in.category.strip() not in valid:
        raise InvalidCategoryError(
            f"Invalid category '{obj_in.category}', expected one of {sorted(valid)}"
        )


def _increment_elo(db: Session, student_id: str, amount: int) -> int:
    """Atomically add ``amount`` to the student's balance and return the new value."""
    db.query(Student).filter(Student.id == student_id).update(
        {
            Student.elo: Student.elo + amount,
            Student.updated_at: datetime.now(timezone.utc),
        },
        synchronize_session=False,
    )
    db.commit()
    return db.query(Student.elo).filter(Student.id == student_id).scalar()


def submit_report(
    db: Session,
    *,
    obj_in: ReportSubmit,
    evaluator,
    notifier,
) -> SubmissionOutcome:
    """
    Grade and record one accomplishment report:

      1. validate input, look up the student (no side effects on failure)
      2. evaluate (never raises; may return a degraded zero result)
      3. insert the report with status 'graded'
      4. add elo_awarded to the student's balance (best-effort)
      5. email the student (best-effort)
    """
    _validate(obj_in)
    student_id = obj_in.student_id.strip()
    category = obj_in.category.strip()
    file_urls = [u for u in (obj_in.file_urls or []) if u]

    student: Optional[Student] = db.get(Student, student_id)
    if student is None:
        raise StudentNotFoundError("Student not found")

    # snapshot before the commits below expire the instance
    elo_before = student.elo
    student_email = student.email
    student_name = student.name

    warnings: list[str] = []

    evaluation = evaluator.evaluate(obj_in.title, obj_in.description, category, file_urls)
    if evaluation.degraded:
        warnings.append(f"evaluation degraded: {evaluation.error}")

    report = Report(
        student_id=student_id,
        title=obj_in.title,
        description=obj_in.description,
        category=category,
        file_urls=file_urls,
        elo_awarded=evaluation.elo_awarded,
        ai_feedback=evaluation.feedback,
        analysis_parts=evaluation.analysis_parts,
        category_score=evaluation.category_score.model_dump(),
        status=ReportStatus.graded.value,
        graded_at=datetime.now(timezone.utc),
    )
    try:
        db.add(report)
        db.commit()
        db.refresh(report)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating report for student {student_id}: {e}")
        raise ReportPersistError("Failed to create report") from e

    new_elo = elo_before + evaluation.elo_awarded
    try:
        new_elo = _increment_elo(db, student_id, evaluation.elo_awarded)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating ELO for student {student_id}: {e}")
        warnings.append(f"elo update failed: {e}")

    try:
        notifier.notify_graded(
            to=student_email,
            student_name=student_name,
            report_title=obj_in.title,
            evaluation=evaluation,
        )
    except Exception as e:
        logger.warning(f"Grade notification for report {report.id} not sent: {e}")
        warnings.append(f"notification failed: {e}")

    logger.info(
        f"Report {report.id} graded for student {student_id}: "
        f"+{evaluation.elo_awarded} (elo {elo_before} -> {new_elo})"
    )
    return SubmissionOutcome(
        report=report,
        evaluation=evaluation,
        new_elo=new_elo,
        warnings=warnings,
    )
