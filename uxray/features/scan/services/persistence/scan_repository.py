import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from uxray.features.scan.models.recommendation import (
    Recommendation,
    RecommendationEffort,
    RecommendationPriority,
)
from uxray.features.scan.models.scan import Scan, ScanStatus
from uxray.features.scan.models.ux_issue import IssueCategory, IssueSeverity, UXIssue
from uxray.features.scan.schemas.analysis import ValidatedIssue, ValidatedRecommendation

logger = logging.getLogger(__name__)


class ScanRepository:
    """
    Storage calls made by the scan pipeline.

    A Scan is written exactly twice: on creation (pending) and on its
    terminal update. Terminal updates on a scan that already left pending
    are refused.
    """

    def __init__(self, db: Session):
        self.db = db

    def create_scan(self, user_id: str, url: str) -> Scan:
        scan = Scan(user_id=user_id, url=url, status=ScanStatus.pending)
        self.db.add(scan)
        self.db.commit()
        self.db.refresh(scan)
        logger.info(f"[{scan.id}] Created pending scan for {url}")
        return scan

    def get_scan(self, scan_id: str) -> Optional[Scan]:
        return self.db.query(Scan).filter(Scan.id == scan_id).first()

    def bulk_insert_findings(
        self,
        scan_id: str,
        issues: List[ValidatedIssue],
        recommendations: List[ValidatedRecommendation],
    ) -> None:
        """Stage child rows for a scan. Committed together with the terminal update."""
        for issue in issues:
            bounds = issue.bounds
            self.db.add(UXIssue(
                scan_id=scan_id,
                category=IssueCategory(issue.category),
                severity=IssueSeverity(issue.severity),
                title=issue.title,
                description=issue.description,
                element=issue.element,
                impact=issue.impact,
                screenshot=issue.screenshot,
                bounds_x=bounds.x if bounds else None,
                bounds_y=bounds.y if bounds else None,
                bounds_width=bounds.width if bounds else None,
                bounds_height=bounds.height if bounds else None,
            ))

        for rec in recommendations:
            self.db.add(Recommendation(
                scan_id=scan_id,
                priority=RecommendationPriority(rec.priority),
                effort=RecommendationEffort(rec.effort),
                title=rec.title,
                description=rec.description,
                implementation=rec.implementation,
                expected_impact=rec.expected_impact,
                element=rec.element,
                screenshot=rec.screenshot,
                is_implemented=rec.is_implemented,
            ))

        self.db.flush()

    def complete_scan(
        self,
        scan_id: str,
        score: int,
        issues_found: int,
        recommendations_count: int,
        summary: str,
    ) -> Optional[Scan]:
        scan = self._pending(scan_id)
        if scan is None:
            return None

        scan.status = ScanStatus.completed
        scan.score = score
        scan.issues_found = issues_found
        scan.recommendations_count = recommendations_count
        scan.summary = summary
        scan.completed_at = datetime.now(timezone.utc)
        self.db.commit()

        logger.info(
            f"[{scan_id}] Scan completed: score={score}, issues={issues_found}, "
            f"recommendations={recommendations_count}"
        )
        return scan

    def fail_scan(self, scan_id: str) -> Optional[Scan]:
        scan = self._pending(scan_id)
        if scan is None:
            return None

        scan.status = ScanStatus.failed
        scan.completed_at = datetime.now(timezone.utc)
        self.db.commit()

        logger.info(f"[{scan_id}] Scan marked as failed")
        return scan

    def _pending(self, scan_id: str) -> Optional[Scan]:
        scan = self.get_scan(scan_id)
        if scan is None:
            logger.error(f"[{scan_id}] Scan not found")
            return None
        if scan.is_terminal:
            logger.warning(f"[{scan_id}] Refusing transition from terminal status {scan.status.value}")
            return None
        return scan
