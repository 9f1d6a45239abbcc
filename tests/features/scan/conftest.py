from io import BytesIO

import pytest
from PIL import Image

from uxray.features.scan.schemas.snapshot import (
    ElementBounds,
    LandmarkBounds,
    PageSnapshot,
    Viewport,
)


def png_bytes(width: int = 1920, height: int = 3000, color=(255, 255, 255)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def full_page_png():
    return png_bytes()


@pytest.fixture
def snapshot(full_page_png):
    return PageSnapshot(
        title="Example Domain",
        url="https://example.com",
        screenshot=full_page_png,
        headings=[{"tag_name": "h1", "text": "Example Domain"}],
        buttons=[{"tag_name": "button", "text": "Sign up"}],
        links=[{"tag_name": "a", "text": "More information", "attributes": {"href": "/more"}}],
        has_navigation=True,
        has_header=True,
        element_bounds=LandmarkBounds(
            navigation=ElementBounds(x=0, y=0, width=1920, height=80),
            header=ElementBounds(x=0, y=0, width=1920, height=120),
            primary_cta=ElementBounds(x=800, y=600, width=200, height=50),
        ),
        viewport=Viewport(width=1920, height=1080),
        body_text="Example Domain. This domain is for use in illustrative examples.",
    )


@pytest.fixture
def bare_snapshot():
    """What the renderer produces when in-page extraction failed."""
    return PageSnapshot(
        title="Analysis Error",
        url="https://example.com",
        body_text="Unable to extract page content",
    )
