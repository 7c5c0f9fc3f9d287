# ultra_eval/api/v1/endpoints/students.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ultra_eval.core.security import get_current_student
from ultra_eval.db.session import get_db
from ultra_eval.models.student import Student
from ultra_eval.schemas.report import ReportPublic
from ultra_eval.schemas.student import Dashboard, StudentPublic, StudentUpdate
from ultra_eval.services import leaderboard_service, student_service

router = APIRouter(prefix="/students", tags=["students"])


@router.get("/me", response_model=StudentPublic)
def read_me(current_student: Student = Depends(get_current_student)):
    return current_student


@router.put("/me", response_model=StudentPublic)
def update_me(
    obj_in: StudentUpdate,
    db: Session = Depends(get_db),
    current_student: Student = Depends(get_current_student),
):
    return student_service.update_profile(db, db_obj=current_student, obj_in=obj_in)


@router.get("/me/reports", response_model=List[ReportPublic])
def list_my_reports(
    db: Session = Depends(get_db),
    current_student: Student = Depends(get_current_student),
    skip: int = 0,
    limit: int = 100,
):
    return student_service.list_reports_for_student(
        db, student_id=current_student.id, skip=skip, limit=limit
    )


@router.get("/me/dashboard", response_model=Dashboard)
def read_dashboard(
    db: Session = Depends(get_db),
    current_student: Student = Depends(get_current_student),
):
    """Current elo, report count, global rank and the five latest reports."""
    return Dashboard(
        student=StudentPublic.model_validate(current_student),
        elo=current_student.elo,
        total_reports=student_service.count_reports_for_student(db, current_student.id),
        rank=leaderboard_service.rank_of(db, current_student.id),
        recent_reports=[
            ReportPublic.model_validate(r)
            for r in student_service.list_reports_for_student(
                db, student_id=current_student.id, limit=5
            )
        ],
    )
