import base64
import logging
from concurrent.futures import ThreadPoolExecutor
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image

from uxray.features.scan.schemas.analysis import IssueFinding, RecommendationFinding, UXAnalysisResult
from uxray.features.scan.schemas.snapshot import ElementBounds, PageSnapshot, Viewport
from uxray.features.scan.services.cropping.landmark_rules import (
    RECOMMENDATION_CROP_LIMIT,
    bounds_for_issue,
    bounds_for_recommendation,
)
from uxray.platform.config import settings

logger = logging.getLogger(__name__)

CROP_PADDING = 20
MAX_CROP_HEIGHT = 400


class RegionCropperService:
    """
    Cuts per-finding crops out of the full-page screenshot.

    Cropping is best-effort: any rectangle or codec problem yields no crop
    for that finding and never fails the scan.
    """

    @staticmethod
    def crop_box(bounds: Optional[ElementBounds], viewport: Viewport) -> Optional[Tuple[int, int, int, int]]:
        """Padded, clamped (x, y, width, height), or None for an empty rectangle."""
        if bounds is None or bounds.is_empty:
            return None

        crop_x = max(0, bounds.x - CROP_PADDING)
        crop_y = max(0, bounds.y - CROP_PADDING)
        crop_width = min(viewport.width - crop_x, bounds.width + CROP_PADDING * 2)
        crop_height = min(bounds.height + CROP_PADDING * 2, MAX_CROP_HEIGHT)

        if crop_width <= 0 or crop_height <= 0:
            return None
        return crop_x, crop_y, crop_width, crop_height

    @staticmethod
    def crop(full_image: bytes, bounds: Optional[ElementBounds], viewport: Viewport) -> Optional[bytes]:
        """Return PNG bytes of the padded region, or None."""
        box = RegionCropperService.crop_box(bounds, viewport)
        if box is None or not full_image:
            return None

        crop_x, crop_y, crop_width, crop_height = box
        try:
            with Image.open(BytesIO(full_image)) as image:
                # Keep the region inside the captured page
                right = min(crop_x + crop_width, image.width)
                bottom = min(crop_y + crop_height, image.height)
                if right <= crop_x or bottom <= crop_y:
                    logger.warning(f"Crop region {box} lies outside the {image.size} screenshot")
                    return None

                region = image.crop((crop_x, crop_y, right, bottom))
                buffer = BytesIO()
                region.save(buffer, format="PNG")
                return buffer.getvalue()

        except (OSError, ValueError, Image.DecompressionBombError) as e:
            logger.warning(f"Failed to capture element screenshot: {e}")
            return None

    @staticmethod
    def attach_crops(result: UXAnalysisResult, snapshot: Optional[PageSnapshot]) -> UXAnalysisResult:
        """
        Return a copy of result with crops attached to every issue and to the
        first few recommendations. Crops run concurrently; they only read the
        shared screenshot.
        """
        if snapshot is None or not snapshot.has_screenshot:
            return result

        issues = [issue.model_copy() for issue in result.issues]
        recommendations = [rec.model_copy() for rec in result.recommendations]

        jobs = []
        for issue in issues:
            jobs.append((issue, bounds_for_issue(issue, snapshot)))
        for rec in recommendations[:RECOMMENDATION_CROP_LIMIT]:
            jobs.append((rec, bounds_for_recommendation(rec, snapshot)))
        jobs = [(finding, bounds) for finding, bounds in jobs if bounds is not None]

        if jobs:
            logger.info(f"Creating {len(jobs)} finding screenshots...")
            with ThreadPoolExecutor(max_workers=settings.CROP_MAX_WORKERS) as executor:
                futures = [
                    (finding, bounds, executor.submit(
                        RegionCropperService.crop, snapshot.screenshot, bounds, snapshot.viewport
                    ))
                    for finding, bounds in jobs
                ]
                for finding, bounds, future in futures:
                    try:
                        cropped = future.result()
                    except Exception as e:
                        logger.warning(f"Failed to crop '{finding.title}': {e}", exc_info=True)
                        continue
                    if cropped:
                        RegionCropperService._apply(finding, cropped, bounds)

        return result.model_copy(update={"issues": issues, "recommendations": recommendations})

    @staticmethod
    def _apply(finding, cropped: bytes, bounds: ElementBounds) -> None:
        finding.screenshot = base64.b64encode(cropped).decode("ascii")
        if isinstance(finding, IssueFinding):
            finding.bounds = bounds
