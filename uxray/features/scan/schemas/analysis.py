from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from uxray.features.scan.schemas.snapshot import ElementBounds

IssueCategoryValue = Literal["layout", "accessibility", "conversion", "mobile", "performance"]
LevelValue = Literal["high", "medium", "low"]


def _to_optional_text(value):
    """LLM output is untrusted: keep strings, stringify scalars, drop containers."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


class Finding(BaseModel):
    """Shape shared by issues and recommendations."""
    title: Optional[str] = None
    description: Optional[str] = None
    element: Optional[str] = None
    screenshot: Optional[str] = None  # base64 PNG crop

    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator("title", "description", "element", "screenshot", mode="before")
    @classmethod
    def _text(cls, value):
        return _to_optional_text(value)


class IssueFinding(Finding):
    category: Optional[str] = None
    severity: Optional[str] = None
    impact: Optional[str] = None
    bounds: Optional[ElementBounds] = None

    @field_validator("category", "severity", "impact", mode="before")
    @classmethod
    def _issue_text(cls, value):
        return _to_optional_text(value)

    @field_validator("bounds", mode="before")
    @classmethod
    def _bounds(cls, value):
        if isinstance(value, ElementBounds):
            return value
        if not isinstance(value, dict):
            return None
        try:
            return ElementBounds.model_validate(value)
        except ValidationError:
            return None


class RecommendationFinding(Finding):
    priority: Optional[str] = None
    implementation: Optional[str] = None
    expected_impact: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("expected_impact", "expectedImpact")
    )
    effort: Optional[str] = None

    @field_validator("priority", "implementation", "expected_impact", "effort", mode="before")
    @classmethod
    def _recommendation_text(cls, value):
        return _to_optional_text(value)


class UXAnalysisResult(BaseModel):
    score: int
    issues: List[IssueFinding] = Field(default_factory=list)
    recommendations: List[RecommendationFinding] = Field(default_factory=list)
    summary: str


class ValidatedIssue(BaseModel):
    category: IssueCategoryValue
    severity: LevelValue
    title: str
    description: str
    element: Optional[str] = None
    impact: str
    screenshot: Optional[str] = None
    bounds: Optional[ElementBounds] = None


class ValidatedRecommendation(BaseModel):
    priority: LevelValue
    title: str
    description: str
    implementation: str
    expected_impact: str
    effort: LevelValue
    element: Optional[str] = None
    screenshot: Optional[str] = None
    is_implemented: bool = False
