import base64
import binascii
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError
from selenium import webdriver
from selenium.common.exceptions import JavascriptException, TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.support.ui import WebDriverWait
from webdriver_manager.chrome import ChromeDriverManager

from uxray.features.scan.exceptions import CaptureError, CaptureFailure
from uxray.features.scan.schemas.snapshot import (
    BODY_TEXT_LIMIT,
    ELEMENT_TEXT_LIMIT,
    MAX_ELEMENTS_PER_COLLECTION,
    DEFAULT_VIEWPORT_HEIGHT,
    DEFAULT_VIEWPORT_WIDTH,
    ElementBounds,
    ElementInfo,
    LandmarkBounds,
    PageSnapshot,
    Viewport,
)
from uxray.features.scan.services.capture.extraction_script import (
    COLLECTION_SELECTORS,
    EXTRACTION_SCRIPT,
    LANDMARK_SELECTORS,
    STRUCTURE_FLAG_SELECTORS,
)
from uxray.platform.config import settings

logger = logging.getLogger(__name__)

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

PAGE_PROBE_SCRIPT = """
return {
  ready: document.readyState,
  origin: performance.timeOrigin,
  href: window.location.href,
  resources: performance.getEntriesByType('resource').length
};
"""

NETWORK_IDLE = "networkidle"
DOM_CONTENT_LOADED = "domcontentloaded"
LOAD = "load"


@dataclass(frozen=True)
class NavigationTier:
    wait_until: str
    timeout: float
    settle: float = 0.0


# Attempted in order, first success wins
NAVIGATION_TIERS = (
    NavigationTier(NETWORK_IDLE, timeout=45),
    NavigationTier(DOM_CONTENT_LOADED, timeout=30, settle=3),
    NavigationTier(LOAD, timeout=20),
)

POST_NAVIGATION_SETTLE = 2
NETWORK_IDLE_WINDOW = 0.5

EXTRACTION_FALLBACK = {
    "title": "Analysis Error",
    "body_text": "Unable to extract page content",
}


class PageReady:
    """
    WebDriverWait condition for one navigation tier.

    The page load strategy is "none", so driver.get() returns as soon as the
    navigation starts. A tier is satisfied once a new document (different
    time origin from the one seen before navigating) reaches the tier's
    readiness level.
    """

    def __init__(self, wait_until: str, previous_origin: Optional[float], idle_window: float = NETWORK_IDLE_WINDOW):
        self.wait_until = wait_until
        self.previous_origin = previous_origin
        self.idle_window = idle_window
        self._resource_count = None
        self._stable_since = None

    def __call__(self, driver) -> bool:
        probe = driver.execute_script(PAGE_PROBE_SCRIPT) or {}
        href = probe.get("href") or ""

        if href.startswith("chrome-error://"):
            raise WebDriverException(f"Browser showed an error page for {href}")

        if href == "about:blank" or probe.get("origin") == self.previous_origin:
            return False

        ready_state = probe.get("ready")
        if self.wait_until == DOM_CONTENT_LOADED:
            return ready_state in ("interactive", "complete")
        if self.wait_until == LOAD:
            return ready_state == "complete"

        # Network quiescence: load event fired and no new resources for idle_window
        now = time.monotonic()
        resources = probe.get("resources")
        if ready_state != "complete" or resources != self._resource_count:
            self._resource_count = resources
            self._stable_since = now
            return False
        return now - self._stable_since >= self.idle_window


class PageRendererService:
    """Drives a headless Chrome to render one page and snapshot it."""

    @staticmethod
    def build_driver() -> webdriver.Chrome:
        chrome_options = Options()
        if settings.BROWSER_HEADLESS:
            chrome_options.add_argument('--headless=new')
        chrome_options.add_argument('--no-sandbox')
        chrome_options.add_argument('--disable-dev-shm-usage')
        chrome_options.add_argument('--disable-gpu')
        chrome_options.add_argument('--disable-blink-features=AutomationControlled')
        chrome_options.add_argument(f'--window-size={DEFAULT_VIEWPORT_WIDTH},{DEFAULT_VIEWPORT_HEIGHT}')
        chrome_options.add_argument(f'--user-agent={DESKTOP_USER_AGENT}')
        chrome_options.page_load_strategy = 'none'

        if settings.CHROMEDRIVER_PATH:
            driver_service = Service(executable_path=settings.CHROMEDRIVER_PATH)
        else:
            driver_service = Service(ChromeDriverManager().install())
        driver = webdriver.Chrome(service=driver_service, options=chrome_options)

        try:
            driver.execute_cdp_cmd("Emulation.setDeviceMetricsOverride", {
                "width": DEFAULT_VIEWPORT_WIDTH,
                "height": DEFAULT_VIEWPORT_HEIGHT,
                "deviceScaleFactor": 1,
                "mobile": False,
            })
        except WebDriverException as e:
            logger.warning(f"Could not pin viewport metrics: {e}")

        return driver

    @staticmethod
    def capture(url: str) -> PageSnapshot:
        """
        Render url in a fresh browser and return its snapshot.

        Raises:
            CaptureError(PageUnreachable): every navigation tier failed
        """
        driver = None
        try:
            driver = PageRendererService.build_driver()

            logger.info(f"Starting capture of: {url}")
            PageRendererService.navigate(driver, url)

            time.sleep(POST_NAVIGATION_SETTLE)

            screenshot = PageRendererService.capture_screenshot(driver)
            raw = PageRendererService.extract_page_data(driver)
            return PageRendererService.build_snapshot(raw, url, screenshot)

        finally:
            if driver:
                try:
                    driver.quit()
                except WebDriverException as e:
                    logger.warning(f"Failed to release browser for {url}: {e}")

    @staticmethod
    def navigate(driver, url: str) -> str:
        """Try each navigation tier in order; returns the tier that succeeded."""
        last_error = None

        for tier in NAVIGATION_TIERS:
            try:
                previous_origin = PageRendererService._current_origin(driver)
                driver.get(url)
                WebDriverWait(
                    driver,
                    tier.timeout,
                    poll_frequency=0.25,
                    ignored_exceptions=(JavascriptException,),
                ).until(PageReady(tier.wait_until, previous_origin))

                if tier.settle:
                    time.sleep(tier.settle)

                logger.info(f"Page loaded with {tier.wait_until}")
                return tier.wait_until

            except TimeoutException as e:
                last_error = e
                logger.warning(f"{tier.wait_until} timed out after {tier.timeout}s for {url}")
            except WebDriverException as e:
                last_error = e
                logger.warning(f"{tier.wait_until} failed for {url}: {e.msg or e}")

        raise CaptureError(
            CaptureFailure.PAGE_UNREACHABLE,
            f"Failed to load page after {len(NAVIGATION_TIERS)} attempts: {last_error}",
        )

    @staticmethod
    def _current_origin(driver) -> Optional[float]:
        try:
            return (driver.execute_script(PAGE_PROBE_SCRIPT) or {}).get("origin")
        except WebDriverException:
            return None

    @staticmethod
    def capture_screenshot(driver) -> Optional[bytes]:
        """Full-page PNG via CDP. Failure is not fatal: the snapshot goes on without an image."""
        try:
            metrics = driver.execute_cdp_cmd("Page.getLayoutMetrics", {})
            content = metrics.get("cssContentSize") or metrics.get("contentSize") or {}
            width = int(content.get("width") or DEFAULT_VIEWPORT_WIDTH)
            height = int(content.get("height") or DEFAULT_VIEWPORT_HEIGHT)

            result = driver.execute_cdp_cmd("Page.captureScreenshot", {
                "format": "png",
                "captureBeyondViewport": True,
                "clip": {"x": 0, "y": 0, "width": width, "height": height, "scale": 1},
            })
            screenshot = base64.b64decode(result["data"])
            logger.info("Full page screenshot captured successfully")
            return screenshot

        except (WebDriverException, KeyError, TypeError, ValueError, binascii.Error) as e:
            logger.warning(f"Screenshot failed: {e}")
            return None

    @staticmethod
    def extract_page_data(driver) -> Dict[str, Any]:
        config = {
            "maxElements": MAX_ELEMENTS_PER_COLLECTION,
            "textLimit": ELEMENT_TEXT_LIMIT,
            "bodyLimit": BODY_TEXT_LIMIT,
            "collections": COLLECTION_SELECTORS,
            "flags": STRUCTURE_FLAG_SELECTORS,
            "landmarks": LANDMARK_SELECTORS,
        }
        try:
            raw = driver.execute_script(EXTRACTION_SCRIPT, config)
            if not isinstance(raw, dict):
                raise JavascriptException(f"Extraction returned {type(raw).__name__}")
            logger.info("Page data extracted successfully")
            return raw
        except WebDriverException as e:
            logger.warning(f"Data extraction failed: {e}")
            return dict(EXTRACTION_FALLBACK)

    @staticmethod
    def build_snapshot(raw: Dict[str, Any], url: str, screenshot: Optional[bytes]) -> PageSnapshot:
        """
        Validate extracted data field by field. A malformed field degrades to
        its empty value; the rest of the snapshot is kept.
        """
        fields: Dict[str, Any] = {
            "title": raw.get("title") or EXTRACTION_FALLBACK["title"],
            "url": raw.get("url") or url,
            "screenshot": screenshot,
            "body_text": raw.get("body_text") or "",
        }

        for name in COLLECTION_SELECTORS:
            fields[name] = PageRendererService._element_list(raw.get(name), name)

        for flag in STRUCTURE_FLAG_SELECTORS:
            fields[flag] = bool(raw.get(flag))

        bounds = {}
        for landmark, value in (raw.get("element_bounds") or {}).items():
            if landmark not in LANDMARK_SELECTORS or not isinstance(value, dict):
                continue
            try:
                bounds[landmark] = ElementBounds.model_validate(value)
            except ValidationError:
                logger.warning(f"Discarding malformed {landmark} bounds: {value}")
        fields["element_bounds"] = LandmarkBounds(**bounds)

        try:
            fields["viewport"] = Viewport.model_validate(raw.get("viewport") or {})
        except ValidationError:
            fields["viewport"] = Viewport()

        return PageSnapshot(**fields)

    @staticmethod
    def _element_list(items, name: str):
        if not isinstance(items, list):
            return []
        try:
            return [ElementInfo.model_validate(item) for item in items[:MAX_ELEMENTS_PER_COLLECTION]]
        except ValidationError as e:
            logger.warning(f"Discarding malformed {name} collection: {e}")
            return []
