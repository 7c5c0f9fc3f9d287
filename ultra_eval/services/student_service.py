# ultra_eval/services/student_service.py
from typing import List, Optional

from sqlalchemy.orm import Session

from ultra_eval.models.report import Report
from ultra_eval.models.student import Student
from ultra_eval.schemas.auth import RegisterRequest
from ultra_eval.schemas.student import StudentUpdate


def get_student(db: Session, student_id: str) -> Optional[Student]:
    return db.get(Student, student_id)


def get_student_by_email(db: Session, email: str) -> Optional[Student]:
    return db.query(Student).filter(Student.email == email).first()


def create_student(
    db: Session,
    *,
    obj_in: RegisterRequest,
    password_hash: str,
) -> Student:
    student = Student(
        email=obj_in.email,
        name=obj_in.name,
        password_hash=password_hash,
        school=obj_in.school,
        grade=obj_in.grade,
        elo=0,
    )
    db.add(student)
    db.commit()
    db.refresh(student)
    return student


def update_profile(
    db: Session,
    *,
    db_obj: Student,
    obj_in: StudentUpdate,
) -> Student:
    """
    Profile edits touch the descriptive fields only; elo is never written here.
    """
    update_data = obj_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(db_obj, field, value)
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def list_reports_for_student(
    db: Session,
    *,
    student_id: str,
    skip: int = 0,
    limit: int = 100,
) -> List[Report]:
    return (
        db.query(Report)
        .filter(Report.student_id == student_id)
        .order_by(Report.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def count_reports_for_student(db: Session, student_id: str) -> int:
    return db.query(Report).filter(Report.student_id == student_id).count()
