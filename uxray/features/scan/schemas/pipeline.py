"""
Pipeline outcome types.

The failed terminal state is an ordinary outcome of a scan, so the pipeline
returns one of these instead of raising. The orchestrator applies the
matching status transition.
"""
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from uxray.features.scan.schemas.analysis import (
    UXAnalysisResult,
    ValidatedIssue,
    ValidatedRecommendation,
)
from uxray.features.scan.schemas.snapshot import PageSnapshot


class AnalysisOutcome(BaseModel):
    """Output of the combined capture + synthesize step."""
    result: UXAnalysisResult
    snapshot: Optional[PageSnapshot] = None
    is_fallback: bool = False


class ScanCompleted(BaseModel):
    kind: Literal["completed"] = "completed"
    score: int
    summary: str
    issues: List[ValidatedIssue] = Field(default_factory=list)
    recommendations: List[ValidatedRecommendation] = Field(default_factory=list)
    is_fallback: bool = False


class ScanFailed(BaseModel):
    kind: Literal["failed"] = "failed"
    reason: str


PipelineOutcome = Union[ScanCompleted, ScanFailed]
