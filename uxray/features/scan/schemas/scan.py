"""
Scan Schemas

Request and response models for the scan API endpoints.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Run a scan
# ============================================================================

class ScanStartRequest(BaseModel):
    """Request to scan a single page."""
    url: Optional[str] = None
    user_id: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "url": "https://example.com",
                "user_id": "019ac5fd-93bf-7368-9f64-7726995a6a04"
            }
        }


class ScanRunResult(BaseModel):
    """What the caller of the orchestrator always receives."""
    id: str
    url: str
    status: str
    score: Optional[int] = None
    issues_found: Optional[int] = None
    recommendations_count: Optional[int] = None
    summary: Optional[str] = None


# ============================================================================
# History & stats
# ============================================================================

class ScanHistoryItem(BaseModel):
    id: str
    url: str
    status: str
    score: Optional[int] = None
    issues_found: int = 0
    recommendations_count: int = 0
    summary: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class ScanHistoryResponse(BaseModel):
    scans: List[ScanHistoryItem]
    pagination: Pagination


class ScanStatsResponse(BaseModel):
    total_scans: int = 0
    completed_scans: int = 0
    avg_score: Optional[float] = None
    total_issues: int = 0
    total_recommendations: int = 0
    this_month_scans: int = 0


# ============================================================================
# Detail
# ============================================================================

class IssueDetail(BaseModel):
    id: str
    category: str
    severity: str
    title: str
    description: str
    element: Optional[str] = None
    impact: str
    screenshot: Optional[str] = None
    bounds_x: Optional[int] = None
    bounds_y: Optional[int] = None
    bounds_width: Optional[int] = None
    bounds_height: Optional[int] = None


class RecommendationDetail(BaseModel):
    id: str
    priority: str
    title: str
    description: str
    implementation: str
    expected_impact: str
    effort: str
    element: Optional[str] = None
    screenshot: Optional[str] = None
    is_implemented: bool = False
    implemented_at: Optional[datetime] = None


class ScanDetailResponse(ScanHistoryItem):
    ux_issues: List[IssueDetail] = Field(default_factory=list)
    recommendations: List[RecommendationDetail] = Field(default_factory=list)


class RecommendationUpdateRequest(BaseModel):
    is_implemented: bool
