"""
Evaluation Service
Grades a student's accomplishment report with an OpenAI chat model.

The evaluator never raises: credentials, network, empty-response and parse
failures all come back as a zero-score result flagged ``degraded``.
"""

import json
import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from ultra_eval.core.config import Settings
from ultra_eval.schemas.evaluation import EvaluationResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a strict, fair achievement evaluator. If a report is garbage or "
    "nonsense, award 0 ELO. Otherwise, award 0-100 based on impact."
)

IMAGE_EXTENSION_RE = re.compile(r"\.(jpg|jpeg|png|webp|gif)$", re.IGNORECASE)


class EvaluationError(Exception):
    pass


def build_grading_prompt(title: str, description: str, category: str) -> str:
    """Build the grading rubric for one report. Same input, same prompt."""
    return f"""You are a high-level achievement evaluator for Ultra Eval. Your task is to analyze a student's reported accomplishment and assign an ELO score (0-100) based on its objective real-world impact.

If there are images attached, ANALYZE THEM carefully as primary evidence.

STUDENT REPORT:
**Title:** {title}
**Category:** {category}
**Description:** {description}

CRITICAL CONSTRAINTS:
1. **NO EM DASHES**: Do not use the em dash character. Use regular hyphens (-) or colons instead.
2. **DETAIL**: Explain exactly why the ELO was awarded by referencing the scores in Impact, Productivity, Quality, and Relevance.
3. **FORMATTING**: Use clear, concise sentences. NO LABEL PREFIXES like 'Part 1:' or 'Insight:' in the list of analysis_parts.

GRADING CRITERIA:
1. **Nonsense/Filler Check**: If the report is nonsensical, gibberish, or lacks substance, you MUST award exactly 0 ELO and 0 on every sub-score.
2. **Impact (0-10)**: Real-world effect or problem-solving scale.
3. **Productivity (0-10)**: Discipline and effort demonstrated.
4. **Quality (0-10)**: Complexity and execution.
5. **Relevance (0-10)**: Academic or professional growth alignment.

ELO CALCULATION (0-100), derived from the four sub-scores above:
- 0: Nonsense or invalid input.
- 1-30: Minor tasks or daily habits.
- 31-60: Significant projects or local recognition.
- 61-90: High-scale impact or national recognition.
- 91-100: Exceptional, world-class excellence.

Respond with a single JSON object and nothing else, in exactly this format:
{{
  "elo_awarded": <integer 0-100>,
  "feedback": "<concise summary of results>",
  "analysis_parts": [
    "<Specific insight about the achievement>",
    "<Breakdown of the impact and complexity>",
    "<Professional encouragement and path forward>"
  ],
  "category_score": {{
    "impact": <integer 0-10>,
    "productivity": <integer 0-10>,
    "quality": <integer 0-10>,
    "relevance": <integer 0-10>
  }}
}}"""


def select_image_urls(
    file_urls: Optional[list[str]],
    storage_hosts: tuple[str, ...] = (),
) -> list[str]:
    """Keep the attachments that look like images.

    A URL qualifies when its path ends in a known image extension (query
    string ignored) or it lives on one of ``storage_hosts``.
    """
    images = []
    for url in file_urls or []:
        if not isinstance(url, str) or not url.strip():
            continue
        path = url.split("?", 1)[0].split("#", 1)[0]
        if IMAGE_EXTENSION_RE.search(path) or any(host in url for host in storage_hosts):
            images.append(url)
    return images


def parse_evaluation(raw: Optional[str]) -> EvaluationResult:
    """Strictly parse the model's JSON reply into a clamped EvaluationResult."""
    if not raw or not raw.strip():
        raise EvaluationError("empty response from model")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise EvaluationError(f"model returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise EvaluationError("model response is not a JSON object")

    # bookkeeping fields are ours, never the model's
    data.pop("degraded", None)
    data.pop("error", None)
    try:
        return EvaluationResult.model_validate(data)
    except ValidationError as e:
        raise EvaluationError(f"model response failed validation: {e}") from e


def build_openai_client(settings: Settings) -> Any:
    """Create the OpenAI client once per process; None when no key is configured."""
    if not settings.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is not set; every evaluation will score 0")
        return None
    from openai import OpenAI

    return OpenAI(api_key=settings.OPENAI_API_KEY)


def storage_hosts_for(settings: Settings) -> tuple[str, ...]:
    if not settings.S3_BUCKET_NAME:
        return ()
    return (f"{settings.S3_BUCKET_NAME}.s3.",)


class Evaluator:
    def __init__(
        self,
        client: Any,
        model: str = "gpt-4o-mini",
        storage_hosts: tuple[str, ...] = (),
    ):
        self.client = client
        self.model = model
        self.storage_hosts = storage_hosts

    def build_messages(
        self,
        title: str,
        description: str,
        category: str,
        file_urls: Optional[list[str]] = None,
    ) -> list[dict]:
        content: list[dict] = [
            {"type": "text", "text": build_grading_prompt(title, description, category)}
        ]
        for url in select_image_urls(file_urls, self.storage_hosts):
            content.append({"type": "image_url", "image_url": {"url": url}})
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": content},
        ]

    def _request(self, messages: list[dict]) -> Optional[str]:
        completion = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            response_format={"type": "json_object"},
        )
        if not completion.choices:
            return None
        return completion.choices[0].message.content

    def evaluate(
        self,
        title: str,
        description: str,
        category: str,
        file_urls: Optional[list[str]] = None,
    ) -> EvaluationResult:
        """
        Score one report.

        Returns:
            EvaluationResult with elo_awarded in [0, 100] and sub-scores in
            [0, 10]. On any failure, EvaluationResult.zero() with the reason
            in ``error``.
        """
        if self.client is None:
            logger.warning(f"Evaluation skipped for report '{title}': OpenAI client is not configured")
            return EvaluationResult.zero("OpenAI client is not configured")

        try:
            messages = self.build_messages(title, description, category, file_urls)
            raw = self._request(messages)
            result = parse_evaluation(raw)
        except Exception as e:
            logger.error(f"Evaluation failed for report '{title}': {e}", exc_info=True)
            return EvaluationResult.zero(str(e))

        result.elo_awarded = max(0, min(100, result.elo_awarded))

        logger.info(
            f"Evaluated report '{title}': elo_awarded={result.elo_awarded}, "
            f"category_score={result.category_score.model_dump()}"
        )
        return result
