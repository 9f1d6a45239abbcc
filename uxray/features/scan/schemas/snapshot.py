"""
Page snapshot schemas.

A PageSnapshot is built once per scan by the page renderer and lives only in
memory. The caps below bound what is sent to the reasoning service.
"""
import enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

MAX_ELEMENTS_PER_COLLECTION = 20
ELEMENT_TEXT_LIMIT = 100
ATTRIBUTE_TEXT_LIMIT = 100
BODY_TEXT_LIMIT = 2000

DEFAULT_VIEWPORT_WIDTH = 1920
DEFAULT_VIEWPORT_HEIGHT = 1080


class Landmark(str, enum.Enum):
    """Named structural regions tracked by bounding rectangle."""
    navigation = "navigation"
    header = "header"
    footer = "footer"
    main_content = "main_content"
    primary_cta = "primary_cta"
    forms = "forms"


class ElementBounds(BaseModel):
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


class Viewport(BaseModel):
    width: int = DEFAULT_VIEWPORT_WIDTH
    height: int = DEFAULT_VIEWPORT_HEIGHT


class ElementAttributes(BaseModel):
    id: str = ""
    class_name: str = Field(default="", alias="class")
    href: str = ""

    model_config = {"populate_by_name": True}

    @field_validator("id", "class_name", "href", mode="before")
    @classmethod
    def _truncate(cls, value):
        return str(value or "")[:ATTRIBUTE_TEXT_LIMIT]


class ElementInfo(BaseModel):
    tag_name: str = ""
    text: str = ""
    attributes: ElementAttributes = Field(default_factory=ElementAttributes)
    bounds: Optional[ElementBounds] = None

    @field_validator("text", mode="before")
    @classmethod
    def _truncate_text(cls, value):
        return str(value or "").strip()[:ELEMENT_TEXT_LIMIT]


class LandmarkBounds(BaseModel):
    navigation: Optional[ElementBounds] = None
    header: Optional[ElementBounds] = None
    footer: Optional[ElementBounds] = None
    main_content: Optional[ElementBounds] = None
    primary_cta: Optional[ElementBounds] = None
    forms: Optional[ElementBounds] = None

    def get(self, landmark: Landmark) -> Optional[ElementBounds]:
        return getattr(self, landmark.value)


class PageSnapshot(BaseModel):
    title: str = ""
    url: str = ""
    screenshot: Optional[bytes] = None  # full-page PNG, absent when capture failed

    headings: List[ElementInfo] = Field(default_factory=list)
    buttons: List[ElementInfo] = Field(default_factory=list)
    links: List[ElementInfo] = Field(default_factory=list)
    forms: List[ElementInfo] = Field(default_factory=list)
    images: List[ElementInfo] = Field(default_factory=list)

    has_navigation: bool = False
    has_header: bool = False
    has_footer: bool = False
    has_sidebar: bool = False

    element_bounds: LandmarkBounds = Field(default_factory=LandmarkBounds)
    viewport: Viewport = Field(default_factory=Viewport)
    body_text: str = ""

    @field_validator("headings", "buttons", "links", "forms", "images", mode="before")
    @classmethod
    def _cap_collection(cls, value):
        if not isinstance(value, list):
            return []
        return value[:MAX_ELEMENTS_PER_COLLECTION]

    @field_validator("has_navigation", "has_header", "has_footer", "has_sidebar", mode="before")
    @classmethod
    def _coerce_flag(cls, value):
        return bool(value)

    @field_validator("body_text", mode="before")
    @classmethod
    def _truncate_body(cls, value):
        return str(value or "")[:BODY_TEXT_LIMIT]

    @field_validator("title", "url", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        return str(value or "")

    @field_validator("element_bounds", mode="before")
    @classmethod
    def _coerce_bounds(cls, value):
        return value if value is not None else {}

    @field_validator("viewport", mode="before")
    @classmethod
    def _coerce_viewport(cls, value):
        return value if value is not None else {}

    @property
    def has_screenshot(self) -> bool:
        return bool(self.screenshot)
