# ultra_eval/models/student.py
import uuid

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ultra_eval.db.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Student(Base):
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    # only set for accounts created through /auth/register
    password_hash = Column(String(255), nullable=True)

    # cumulative score: additive on submission, absolute on admin override
    elo = Column(Integer, nullable=False, default=0, index=True)

    school = Column(String(255), nullable=True)
    grade = Column(String(50), nullable=True)
    avatar_url = Column(String(1024), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    reports = relationship(
        "Report",
        back_populates="student",
        order_by="Report.created_at.desc()",
    )
