# ultra_eval/schemas/evaluation.py
import math
from typing import Any

from pydantic import BaseModel, Field, field_validator

ELO_MIN, ELO_MAX = 0, 100
SUB_SCORE_MIN, SUB_SCORE_MAX = 0, 10


def clamp_score(value: Any, low: int, high: int) -> int:
    """Coerce a model-supplied number to int and force it into [low, high].

    Accepts ints, floats and numeric strings. Booleans, NaN and anything
    non-numeric raise ValueError.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"expected a number, got {value!r}")
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except TypeError:
        raise ValueError(f"expected a number, got {type(value).__name__}")
    if math.isnan(number):
        raise ValueError("score is NaN")
    if math.isinf(number):
        return high if number > 0 else low
    return max(low, min(high, int(round(number))))


class CategoryScore(BaseModel):
    impact: int = 0
    productivity: int = 0
    quality: int = 0
    relevance: int = 0

    @field_validator("impact", "productivity", "quality", "relevance", mode="before")
    @classmethod
    def _clamp_sub_score(cls, v: Any) -> int:
        return clamp_score(v, SUB_SCORE_MIN, SUB_SCORE_MAX)


class EvaluationResult(BaseModel):
    """Normalized output of one grading call."""

    elo_awarded: int
    feedback: str
    analysis_parts: list[str] = Field(default_factory=list)
    category_score: CategoryScore = Field(default_factory=CategoryScore)

    # set when the result is the zero fallback rather than a real grade
    degraded: bool = False
    error: str | None = None

    @field_validator("elo_awarded", mode="before")
    @classmethod
    def _clamp_elo(cls, v: Any) -> int:
        return clamp_score(v, ELO_MIN, ELO_MAX)

    @field_validator("analysis_parts", mode="before")
    @classmethod
    def _drop_non_text_parts(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError("analysis_parts must be a list")
        return [str(part) for part in v if part is not None]

    @field_validator("category_score", mode="before")
    @classmethod
    def _default_category_score(cls, v: Any) -> Any:
        return {} if v is None else v

    @classmethod
    def zero(cls, error: str | None = None) -> "EvaluationResult":
        return cls(
            elo_awarded=0,
            feedback="Evaluation failed.",
            analysis_parts=["Evaluation failed. Please provide more significant details."],
            category_score=CategoryScore(),
            degraded=True,
            error=error,
        )


class EvaluationPublic(BaseModel):
    """Grade as returned to the submitter; a fallback zero looks like any other zero."""

    elo_awarded: int
    feedback: str
    analysis_parts: list[str] = []
    category_score: CategoryScore

    model_config = {"from_attributes": True}
