from uxray.features.scan.schemas.analysis import IssueFinding, RecommendationFinding, UXAnalysisResult
from uxray.features.scan.services.validation.result_validator import (
    DESCRIPTION_PLACEHOLDER,
    EXPECTED_IMPACT_PLACEHOLDER,
    IMPACT_PLACEHOLDER,
    IMPLEMENTATION_PLACEHOLDER,
    ISSUE_TITLE_PLACEHOLDER,
    RECOMMENDATION_TITLE_PLACEHOLDER,
    ResultValidator,
    coerce_enum,
)


class TestCoerceEnum:
    def test_trims_and_lowercases(self):
        assert coerce_enum("Layout ", ("layout", "mobile"), "layout") == "layout"
        assert coerce_enum("  HIGH", ("high", "low"), "medium") == "high"

    def test_unknown_values_use_default(self):
        assert coerce_enum("typography", ("layout",), "layout") == "layout"
        assert coerce_enum(None, ("layout",), "layout") == "layout"
        assert coerce_enum(3, ("layout",), "layout") == "layout"


class TestNormalize:
    def test_issue_enums_are_coerced(self):
        issue = ResultValidator.normalize_issue({
            "category": "Layout ",
            "severity": "urgent",
            "title": "Crowded hero",
            "description": "Too many competing elements",
        })
        assert issue.category == "layout"
        assert issue.severity == "medium"
        assert issue.impact == IMPACT_PLACEHOLDER
        assert issue.element is None

    def test_missing_text_gets_placeholders(self):
        issue = ResultValidator.normalize_issue({"category": "mobile"})
        assert issue.title == ISSUE_TITLE_PLACEHOLDER
        assert issue.description == DESCRIPTION_PLACEHOLDER

        rec = ResultValidator.normalize_recommendation({"priority": "LOW", "effort": "huge", "title": "  "})
        assert rec.title == RECOMMENDATION_TITLE_PLACEHOLDER
        assert rec.priority == "low"
        assert rec.effort == "medium"
        assert rec.implementation == IMPLEMENTATION_PLACEHOLDER
        assert rec.expected_impact == EXPECTED_IMPACT_PLACEHOLDER
        assert rec.is_implemented is False

    def test_accepts_camel_case_expected_impact(self):
        rec = ResultValidator.normalize_recommendation({"expectedImpact": "More signups"})
        assert rec.expected_impact == "More signups"

    def test_normalizes_analysis_result(self):
        result = UXAnalysisResult(
            score=80,
            issues=[IssueFinding(category="CONVERSION", severity="Low", title="Weak CTA", description="d")],
            recommendations=[RecommendationFinding(title="Stronger CTA", expected_impact="More clicks")],
            summary="s",
        )
        issues, recommendations = ResultValidator.normalize(result)

        assert issues[0].category == "conversion"
        assert issues[0].severity == "low"
        assert recommendations[0].expected_impact == "More clicks"
        assert recommendations[0].description == DESCRIPTION_PLACEHOLDER

    def test_non_object_findings_get_placeholders(self):
        issues, recommendations = ResultValidator.normalize({
            "issues": ["not an object", {"title": "Kept"}],
            "recommendations": None,
        })
        # a string has no fields, so it normalizes to placeholders
        assert [issue.title for issue in issues] == [ISSUE_TITLE_PLACEHOLDER, "Kept"]
        assert recommendations == []

    def test_normalizing_twice_changes_nothing(self):
        raw = {
            "issues": [
                {"category": "Layout ", "severity": "HIGH", "title": "A", "description": "B",
                 "bounds": {"x": 1, "y": 2, "width": 3, "height": 4}},
                {"category": "??"},
            ],
            "recommendations": [
                {"priority": "High", "effort": "LOW", "title": "C", "expectedImpact": "D"},
                {},
            ],
        }
        once = ResultValidator.normalize(raw)
        twice = ResultValidator.normalize(once)

        assert twice == once
        assert once.issues[0].bounds.width == 3
