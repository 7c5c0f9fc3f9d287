# ultra_eval/api/v1/endpoints/admin.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ultra_eval.core.security import get_current_admin_email
from ultra_eval.db.session import get_db
from ultra_eval.schemas.report import ReportAdminUpdate, ReportPublic
from ultra_eval.schemas.student import EloOverride, StudentDetail, StudentPublic
from ultra_eval.services import admin_service, leaderboard_service, student_service

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/students", response_model=List[StudentPublic])
def list_students(
    db: Session = Depends(get_db),
    admin_email: str = Depends(get_current_admin_email),
):
    """All students, highest elo first."""
    return leaderboard_service.list_students_by_elo(db)


@router.get("/students/{student_id}", response_model=StudentDetail)
def get_student(
    student_id: str,
    db: Session = Depends(get_db),
    admin_email: str = Depends(get_current_admin_email),
):
    student = student_service.get_student(db, student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


@router.put("/students/{student_id}/elo", response_model=StudentPublic)
def override_elo(
    student_id: str,
    obj_in: EloOverride,
    db: Session = Depends(get_db),
    admin_email: str = Depends(get_current_admin_email),
):
    student = student_service.get_student(db, student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return admin_service.override_student_elo(
        db, student=student, elo=obj_in.elo, admin_email=admin_email
    )


@router.put("/reports/{report_id}", response_model=ReportPublic)
def update_report(
    report_id: str,
    obj_in: ReportAdminUpdate,
    db: Session = Depends(get_db),
    admin_email: str = Depends(get_current_admin_email),
):
    report = admin_service.get_report(db, report_id)
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    return admin_service.admin_update_report(
        db, report=report, obj_in=obj_in, admin_email=admin_email
    )
