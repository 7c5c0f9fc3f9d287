# ultra_eval/api/v1/endpoints/submissions.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ultra_eval.api.deps import get_evaluator, get_notifier
from ultra_eval.db.session import get_db
from ultra_eval.schemas.evaluation import EvaluationPublic
from ultra_eval.schemas.report import ReportPublic, ReportSubmit, SubmissionResponse
from ultra_eval.services import submission_service
from ultra_eval.services.evaluation_service import Evaluator

router = APIRouter(tags=["submissions"])


@router.post("/submit-report", response_model=SubmissionResponse)
def submit_report(
    obj_in: ReportSubmit,
    db: Session = Depends(get_db),
    evaluator: Evaluator = Depends(get_evaluator),
    notifier=Depends(get_notifier),
):
    """
    Grade a report synchronously, store it, credit the student and email them.
    """
    try:
        outcome = submission_service.submit_report(
            db, obj_in=obj_in, evaluator=evaluator, notifier=notifier
        )
    except submission_service.SubmissionError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return SubmissionResponse(
        success=outcome.success,
        report=ReportPublic.model_validate(outcome.report),
        evaluation=EvaluationPublic.model_validate(outcome.evaluation),
        new_elo=outcome.new_elo,
    )
