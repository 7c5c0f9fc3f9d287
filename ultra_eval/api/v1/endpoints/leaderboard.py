# ultra_eval/api/v1/endpoints/leaderboard.py
from typing import List, Literal

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ultra_eval.db.session import get_db
from ultra_eval.schemas.student import LeaderboardEntry
from ultra_eval.services import leaderboard_service

router = APIRouter(tags=["leaderboard"])


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
def read_leaderboard(
    db: Session = Depends(get_db),
    search: str | None = None,
    order: Literal["desc", "asc"] = "desc",
):
    return leaderboard_service.build_leaderboard(db, search=search, order=order)
