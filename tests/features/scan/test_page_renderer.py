import base64
from unittest.mock import MagicMock, patch

import pytest
from selenium.common.exceptions import JavascriptException, TimeoutException, WebDriverException

from uxray.features.scan.exceptions import CaptureError, CaptureFailure
from uxray.features.scan.services.capture.page_renderer import (
    DOM_CONTENT_LOADED,
    LOAD,
    NETWORK_IDLE,
    PageReady,
    PageRendererService,
)

MODULE = "uxray.features.scan.services.capture.page_renderer"


@pytest.fixture
def mock_driver():
    driver = MagicMock()
    driver.execute_script.return_value = {"origin": 1.0, "href": "about:blank", "ready": "complete"}
    return driver


@pytest.fixture
def no_sleep():
    with patch(f"{MODULE}.time.sleep") as sleep:
        yield sleep


def _raw_page(**overrides):
    raw = {
        "title": "Example Domain",
        "url": "https://example.com/",
        "headings": [{"tag_name": "h1", "text": "Example Domain"}],
        "buttons": [],
        "links": [{"tag_name": "a", "text": "More", "attributes": {"href": "https://iana.org", "class": "link"}}],
        "forms": [],
        "images": [],
        "has_navigation": True,
        "has_header": False,
        "has_footer": True,
        "has_sidebar": False,
        "element_bounds": {
            "navigation": {"x": 0, "y": 0, "width": 1920, "height": 60},
            "header": None,
        },
        "viewport": {"width": 1920, "height": 1080},
        "body_text": "Example Domain",
    }
    raw.update(overrides)
    return raw


class TestPageReady:
    def test_waits_for_a_new_document(self):
        driver = MagicMock()
        driver.execute_script.return_value = {"origin": 1.0, "href": "https://example.com/", "ready": "complete"}
        assert PageReady(LOAD, previous_origin=1.0)(driver) is False

    def test_dom_content_loaded_accepts_interactive(self):
        driver = MagicMock()
        driver.execute_script.return_value = {"origin": 2.0, "href": "https://example.com/", "ready": "interactive"}
        assert PageReady(DOM_CONTENT_LOADED, previous_origin=1.0)(driver) is True
        assert PageReady(LOAD, previous_origin=1.0)(driver) is False

    def test_error_page_aborts_the_tier(self):
        driver = MagicMock()
        driver.execute_script.return_value = {"origin": 2.0, "href": "chrome-error://chromewebdata/", "ready": "complete"}
        with pytest.raises(WebDriverException):
            PageReady(LOAD, previous_origin=1.0)(driver)

    def test_network_idle_needs_a_quiet_window(self):
        driver = MagicMock()
        driver.execute_script.return_value = {
            "origin": 2.0, "href": "https://example.com/", "ready": "complete", "resources": 12,
        }
        condition = PageReady(NETWORK_IDLE, previous_origin=1.0, idle_window=0.5)

        with patch(f"{MODULE}.time.monotonic", side_effect=[10.0, 10.2, 10.6]):
            assert condition(driver) is False
            assert condition(driver) is False
            assert condition(driver) is True

    def test_new_resources_restart_the_idle_window(self):
        driver = MagicMock()
        probes = [
            {"origin": 2.0, "href": "https://example.com/", "ready": "complete", "resources": 3},
            {"origin": 2.0, "href": "https://example.com/", "ready": "complete", "resources": 7},
            {"origin": 2.0, "href": "https://example.com/", "ready": "complete", "resources": 7},
        ]
        driver.execute_script.side_effect = probes
        condition = PageReady(NETWORK_IDLE, previous_origin=1.0, idle_window=0.5)

        with patch(f"{MODULE}.time.monotonic", side_effect=[0.0, 1.0, 1.2]):
            assert condition(driver) is False
            assert condition(driver) is False
            assert condition(driver) is False


class TestNavigate:
    def test_first_tier_success(self, mock_driver, no_sleep):
        with patch(f"{MODULE}.WebDriverWait") as wait:
            wait.return_value.until.return_value = True
            tier = PageRendererService.navigate(mock_driver, "https://example.com")

        assert tier == NETWORK_IDLE
        assert wait.call_args.args[1] == 45
        mock_driver.get.assert_called_once_with("https://example.com")
        no_sleep.assert_not_called()

    def test_falls_back_to_dom_content_loaded_with_settle(self, mock_driver, no_sleep):
        with patch(f"{MODULE}.WebDriverWait") as wait:
            wait.return_value.until.side_effect = [TimeoutException(), True]
            tier = PageRendererService.navigate(mock_driver, "https://example.com")

        assert tier == DOM_CONTENT_LOADED
        assert [c.args[1] for c in wait.call_args_list] == [45, 30]
        no_sleep.assert_called_once_with(3)

    def test_all_tiers_failing_raises_page_unreachable(self, mock_driver, no_sleep):
        with patch(f"{MODULE}.WebDriverWait") as wait:
            wait.return_value.until.side_effect = [
                TimeoutException(),
                TimeoutException(),
                WebDriverException("net::ERR_NAME_NOT_RESOLVED"),
            ]
            with pytest.raises(CaptureError) as exc_info:
                PageRendererService.navigate(mock_driver, "https://does-not-exist.invalid")

        assert exc_info.value.reason == CaptureFailure.PAGE_UNREACHABLE
        assert mock_driver.get.call_count == 3
        assert [c.args[1] for c in wait.call_args_list] == [45, 30, 20]


class TestCaptureScreenshot:
    def test_full_page_clip_from_layout_metrics(self, mock_driver):
        def cdp(command, params):
            if command == "Page.getLayoutMetrics":
                return {"cssContentSize": {"width": 1920, "height": 4321.5}}
            return {"data": base64.b64encode(b"png-bytes").decode()}

        mock_driver.execute_cdp_cmd.side_effect = cdp
        assert PageRendererService.capture_screenshot(mock_driver) == b"png-bytes"

        command, params = mock_driver.execute_cdp_cmd.call_args.args
        assert command == "Page.captureScreenshot"
        assert params["clip"]["height"] == 4321
        assert params["captureBeyondViewport"] is True

    def test_failure_returns_none(self, mock_driver):
        mock_driver.execute_cdp_cmd.side_effect = WebDriverException("target closed")
        assert PageRendererService.capture_screenshot(mock_driver) is None


class TestExtraction:
    def test_script_failure_uses_fallback(self, mock_driver):
        mock_driver.execute_script.side_effect = JavascriptException("boom")
        raw = PageRendererService.extract_page_data(mock_driver)

        snapshot = PageRendererService.build_snapshot(raw, "https://example.com", None)
        assert snapshot.title == "Analysis Error"
        assert snapshot.body_text == "Unable to extract page content"
        assert snapshot.headings == []
        assert snapshot.viewport.width == 1920
        assert snapshot.viewport.height == 1080
        assert snapshot.has_screenshot is False

    def test_build_snapshot(self):
        snapshot = PageRendererService.build_snapshot(_raw_page(), "https://example.com", b"png")

        assert snapshot.title == "Example Domain"
        assert snapshot.has_navigation is True
        assert snapshot.has_header is False
        assert snapshot.links[0].attributes.href == "https://iana.org"
        assert snapshot.links[0].attributes.class_name == "link"
        assert snapshot.element_bounds.navigation.height == 60
        assert snapshot.element_bounds.header is None
        assert snapshot.screenshot == b"png"

    def test_collections_and_text_are_capped(self):
        raw = _raw_page(
            headings=[{"tag_name": "h2", "text": "x" * 150} for _ in range(30)],
            body_text="y" * 5000,
        )
        snapshot = PageRendererService.build_snapshot(raw, "https://example.com", None)

        assert len(snapshot.headings) == 20
        assert len(snapshot.headings[0].text) == 100
        assert len(snapshot.body_text) == 2000

    def test_malformed_fields_degrade_individually(self):
        raw = _raw_page(
            buttons="not a list",
            images=[{"tag_name": "img", "bounds": {"x": "left"}}],
            element_bounds={"navigation": {"x": "zero"}, "footer": {"x": 0, "y": 900, "width": 1920, "height": 100}},
            viewport=None,
        )
        snapshot = PageRendererService.build_snapshot(raw, "https://example.com", None)

        assert snapshot.buttons == []
        assert snapshot.images == []
        assert snapshot.element_bounds.navigation is None
        assert snapshot.element_bounds.footer.y == 900
        assert snapshot.headings[0].text == "Example Domain"
        assert snapshot.viewport.width == 1920


class TestCapture:
    def test_capture_releases_browser(self, mock_driver, no_sleep):
        with patch.object(PageRendererService, "build_driver", return_value=mock_driver), \
                patch.object(PageRendererService, "navigate", return_value=NETWORK_IDLE), \
                patch.object(PageRendererService, "capture_screenshot", return_value=b"png"), \
                patch.object(PageRendererService, "extract_page_data", return_value=_raw_page()):
            snapshot = PageRendererService.capture("https://example.com")

        assert snapshot.screenshot == b"png"
        assert snapshot.title == "Example Domain"
        no_sleep.assert_called_once_with(2)
        mock_driver.quit.assert_called_once()

    def test_capture_releases_browser_when_navigation_fails(self, mock_driver, no_sleep):
        error = CaptureError(CaptureFailure.PAGE_UNREACHABLE, "timeout")
        with patch.object(PageRendererService, "build_driver", return_value=mock_driver), \
                patch.object(PageRendererService, "navigate", side_effect=error):
            with pytest.raises(CaptureError):
                PageRendererService.capture("https://example.com")

        mock_driver.quit.assert_called_once()

    @pytest.mark.skip(reason="Requires Selenium WebDriver and network access")
    def test_capture_example_com(self):
        snapshot = PageRendererService.capture("https://example.com")
        assert snapshot.title
        assert snapshot.has_screenshot
