# ultra_eval/services/leaderboard_service.py
from typing import List

from sqlalchemy.orm import Session

from ultra_eval.models.student import Student
from ultra_eval.schemas.student import LeaderboardEntry


def list_students_by_elo(db: Session) -> List[Student]:
    """All students, highest elo first; ties broken by name then id so ranks are stable."""
    return (
        db.query(Student)
        .order_by(Student.elo.desc(), Student.name.asc(), Student.id.asc())
        .all()
    )


def _matches(entry: LeaderboardEntry, query: str) -> bool:
    fields = (entry.name, entry.school, entry.email)
    return any(value and query in value.lower() for value in fields)


def build_leaderboard(
    db: Session,
    *,
    search: str | None = None,
    order: str = "desc",
) -> List[LeaderboardEntry]:
    """
    Rank every student by elo, then filter and order for display.

    Rank is the position in the global descending order and is assigned
    before filtering, so a student keeps their rank in search results.
    """
    ranked = [
        LeaderboardEntry(
            rank=index + 1,
            id=s.id,
            name=s.name,
            email=s.email,
            school=s.school,
            grade=s.grade,
            avatar_url=s.avatar_url,
            elo=s.elo,
        )
        for index, s in enumerate(list_students_by_elo(db))
    ]

    query = (search or "").strip().lower()
    if query:
        ranked = [entry for entry in ranked if _matches(entry, query)]

    if order == "asc":
        ranked.reverse()
    return ranked


def rank_of(db: Session, student_id: str) -> int:
    for index, s in enumerate(list_students_by_elo(db)):
        if s.id == student_id:
            return index + 1
    return 0
