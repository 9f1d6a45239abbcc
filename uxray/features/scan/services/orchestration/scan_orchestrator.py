import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from uxray.features.scan.exceptions import ScanInputError
from uxray.features.scan.models.scan import ScanStatus
from uxray.features.scan.schemas.pipeline import ScanCompleted, ScanFailed
from uxray.features.scan.schemas.scan import ScanRunResult
from uxray.features.scan.services.orchestration.scan_pipeline import ScanPipeline
from uxray.features.scan.services.persistence.scan_repository import ScanRepository
from uxray.platform.utils.url_validator import validate_url

logger = logging.getLogger(__name__)


class ScanOrchestrator:
    """
    Scan lifecycle: pending -> completed | failed.

    Input problems raise ScanInputError before any record exists. Past that
    point every invocation ends in a terminal status and a ScanRunResult is
    returned; storage errors are logged and rolled back, not raised.
    """

    def __init__(self, db: Session, pipeline: Optional[ScanPipeline] = None):
        self.db = db
        self.repository = ScanRepository(db)
        self.pipeline = pipeline or ScanPipeline()

    @staticmethod
    def validate_input(url: Optional[str], user_id: Optional[str]) -> str:
        """Return the normalized URL, or raise ScanInputError."""
        if not url or not user_id:
            raise ScanInputError("URL and userId are required")

        is_valid, normalized_url, error = validate_url(url)
        if not is_valid:
            raise ScanInputError(error)
        return normalized_url

    def run_scan(self, url: Optional[str], user_id: Optional[str]) -> ScanRunResult:
        target_url = self.validate_input(url, user_id)

        scan = self.repository.create_scan(user_id=user_id, url=target_url)
        scan_id = scan.id
        logger.info(f"[{scan_id}] Starting scan of {target_url}")

        outcome = self.pipeline.execute(target_url, scan_id=scan_id)

        if isinstance(outcome, ScanFailed):
            self._fail(scan_id)
            return ScanRunResult(id=scan_id, url=target_url, status=ScanStatus.failed.value)

        self._complete(scan_id, outcome)
        return ScanRunResult(
            id=scan_id,
            url=target_url,
            status=ScanStatus.completed.value,
            score=outcome.score,
            issues_found=len(outcome.issues),
            recommendations_count=len(outcome.recommendations),
            summary=outcome.summary,
        )

    def _complete(self, scan_id: str, outcome: ScanCompleted) -> None:
        try:
            self.repository.bulk_insert_findings(scan_id, outcome.issues, outcome.recommendations)
            scan = self.repository.complete_scan(
                scan_id,
                score=outcome.score,
                issues_found=len(outcome.issues),
                recommendations_count=len(outcome.recommendations),
                summary=outcome.summary,
            )
            if scan is None:
                self.db.rollback()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[{scan_id}] Failed to save scan results: {e}", exc_info=True)

    def _fail(self, scan_id: str) -> None:
        try:
            self.repository.fail_scan(scan_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[{scan_id}] Failed to mark scan as failed: {e}", exc_info=True)
