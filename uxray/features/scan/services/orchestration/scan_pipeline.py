import logging
from typing import Callable, Optional

from uxray.features.scan.schemas.pipeline import (
    AnalysisOutcome,
    PipelineOutcome,
    ScanCompleted,
    ScanFailed,
)
from uxray.features.scan.schemas.snapshot import PageSnapshot
from uxray.features.scan.services.analysis.ux_analyzer import UXAnalyzerService
from uxray.features.scan.services.capture.page_renderer import PageRendererService
from uxray.features.scan.services.cropping.region_cropper import RegionCropperService
from uxray.features.scan.services.validation.result_validator import ResultValidator

logger = logging.getLogger(__name__)


class ScanPipeline:
    """
    Renderer -> Synthesizer -> Cropper -> Validator for a single URL.

    Never raises: anything escaping the combined capture + synthesize step
    becomes a ScanFailed outcome, which the caller turns into the failed
    status. Cropping and validation never fail a scan.
    """

    def __init__(
        self,
        capture: Optional[Callable[[str], PageSnapshot]] = None,
        synthesize: Optional[Callable[[str, PageSnapshot], AnalysisOutcome]] = None,
    ):
        self.capture = capture or PageRendererService.capture
        self.synthesize = synthesize or UXAnalyzerService.synthesize

    def analyze(self, url: str) -> AnalysisOutcome:
        snapshot = self.capture(url)
        return self.synthesize(url, snapshot)

    def execute(self, url: str, scan_id: str = "-") -> PipelineOutcome:
        try:
            outcome = self.analyze(url)
        except Exception as e:
            logger.error(f"[{scan_id}] Analysis failed for {url}: {e}", exc_info=True)
            return ScanFailed(reason=str(e) or type(e).__name__)

        if outcome.is_fallback:
            logger.warning(f"[{scan_id}] Using fallback analysis for {url}")

        try:
            result = RegionCropperService.attach_crops(outcome.result, outcome.snapshot)
        except Exception as e:
            logger.warning(f"[{scan_id}] Cropping skipped: {e}", exc_info=True)
            result = outcome.result

        issues, recommendations = ResultValidator.normalize(result)

        logger.info(
            f"[{scan_id}] Analysis ready: score={result.score}, "
            f"issues={len(issues)}, recommendations={len(recommendations)}"
        )
        return ScanCompleted(
            score=result.score,
            summary=result.summary,
            issues=issues,
            recommendations=recommendations,
            is_fallback=outcome.is_fallback,
        )
