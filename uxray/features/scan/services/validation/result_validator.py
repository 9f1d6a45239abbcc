import logging
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel

from uxray.features.scan.schemas.analysis import ValidatedIssue, ValidatedRecommendation

logger = logging.getLogger(__name__)

VALID_CATEGORIES = ("layout", "accessibility", "conversion", "mobile", "performance")
VALID_SEVERITIES = ("high", "medium", "low")
VALID_PRIORITIES = ("high", "medium", "low")
VALID_EFFORTS = ("low", "medium", "high")

DEFAULT_CATEGORY = "layout"
DEFAULT_SEVERITY = "medium"
DEFAULT_PRIORITY = "medium"
DEFAULT_EFFORT = "medium"

ISSUE_TITLE_PLACEHOLDER = "UX Issue"
RECOMMENDATION_TITLE_PLACEHOLDER = "UX Recommendation"
DESCRIPTION_PLACEHOLDER = "No description provided"
IMPACT_PLACEHOLDER = "Impact on user experience"
IMPLEMENTATION_PLACEHOLDER = "Implementation details not provided"
EXPECTED_IMPACT_PLACEHOLDER = "Expected improvement in user experience"


class NormalizedFindings(NamedTuple):
    issues: List[ValidatedIssue]
    recommendations: List[ValidatedRecommendation]


def _as_dict(value: Any) -> Dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if hasattr(value, "_asdict"):
        return value._asdict()
    if isinstance(value, dict):
        return value
    return {}


def _field(finding: Dict[str, Any], name: str, *aliases: str) -> Any:
    for key in (name, *aliases):
        if finding.get(key) is not None:
            return finding[key]
    return None


def coerce_enum(value: Any, allowed: Tuple[str, ...], default: str) -> str:
    """Lower-case and trim; anything outside the closed set becomes default."""
    if not isinstance(value, str):
        return default
    normalized = value.strip().lower()
    return normalized if normalized in allowed else default


def text_or(value: Any, placeholder: Optional[str]) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return placeholder


class ResultValidator:
    """
    Normalizes synthesized findings into storage-ready records.

    Enum values are coerced, never a reason to reject. The only rejections
    are findings still missing a required text field after defaulting.
    Normalizing already-normalized findings returns them unchanged.
    """

    @staticmethod
    def normalize_issue(issue: Any) -> Optional[ValidatedIssue]:
        issue = _as_dict(issue)
        title = text_or(_field(issue, "title"), ISSUE_TITLE_PLACEHOLDER)
        description = text_or(_field(issue, "description"), DESCRIPTION_PLACEHOLDER)
        if not title or not description:
            return None

        return ValidatedIssue(
            category=coerce_enum(_field(issue, "category"), VALID_CATEGORIES, DEFAULT_CATEGORY),
            severity=coerce_enum(_field(issue, "severity"), VALID_SEVERITIES, DEFAULT_SEVERITY),
            title=title,
            description=description,
            element=text_or(_field(issue, "element"), None),
            impact=text_or(_field(issue, "impact"), IMPACT_PLACEHOLDER),
            screenshot=text_or(_field(issue, "screenshot"), None),
            bounds=_field(issue, "bounds"),
        )

    @staticmethod
    def normalize_recommendation(rec: Any) -> Optional[ValidatedRecommendation]:
        rec = _as_dict(rec)
        title = text_or(_field(rec, "title"), RECOMMENDATION_TITLE_PLACEHOLDER)
        description = text_or(_field(rec, "description"), DESCRIPTION_PLACEHOLDER)
        implementation = text_or(_field(rec, "implementation"), IMPLEMENTATION_PLACEHOLDER)
        if not title or not description or not implementation:
            return None

        return ValidatedRecommendation(
            priority=coerce_enum(_field(rec, "priority"), VALID_PRIORITIES, DEFAULT_PRIORITY),
            title=title,
            description=description,
            implementation=implementation,
            expected_impact=text_or(
                _field(rec, "expected_impact", "expectedImpact"), EXPECTED_IMPACT_PLACEHOLDER
            ),
            effort=coerce_enum(_field(rec, "effort"), VALID_EFFORTS, DEFAULT_EFFORT),
            element=text_or(_field(rec, "element"), None),
            screenshot=text_or(_field(rec, "screenshot"), None),
            is_implemented=bool(_field(rec, "is_implemented")),
        )

    @staticmethod
    def normalize(result: Any) -> NormalizedFindings:
        result = _as_dict(result)
        issues = ResultValidator._collect(
            _field(result, "issues") or [], ResultValidator.normalize_issue, "issue"
        )
        recommendations = ResultValidator._collect(
            _field(result, "recommendations") or [], ResultValidator.normalize_recommendation, "recommendation"
        )
        return NormalizedFindings(issues, recommendations)

    @staticmethod
    def _collect(findings: Iterable[Any], normalizer, kind: str) -> list:
        validated = []
        for finding in findings:
            record = normalizer(finding)
            if record is None:
                logger.warning(f"Dropping {kind} missing required fields: {finding!r}")
                continue
            validated.append(record)
        return validated
