"""
Scan models package.
"""
from uxray.features.scan.models.scan import Scan, ScanStatus
from uxray.features.scan.models.ux_issue import UXIssue, IssueCategory, IssueSeverity
from uxray.features.scan.models.recommendation import (
    Recommendation,
    RecommendationPriority,
    RecommendationEffort,
)

__all__ = [
    "Scan",
    "ScanStatus",
    "UXIssue",
    "IssueCategory",
    "IssueSeverity",
    "Recommendation",
    "RecommendationPriority",
    "RecommendationEffort",
]
