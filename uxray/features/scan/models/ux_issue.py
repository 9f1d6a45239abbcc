from sqlalchemy import Column, String, Integer, Text, ForeignKey, Index, Enum
from sqlalchemy.orm import relationship
import enum

from uxray.platform.db.base import BaseModel


class IssueCategory(enum.Enum):
    """Issue category classification"""
    layout = "layout"
    accessibility = "accessibility"
    conversion = "conversion"
    mobile = "mobile"
    performance = "performance"


class IssueSeverity(enum.Enum):
    """Issue severity levels"""
    high = "high"
    medium = "medium"
    low = "low"


class UXIssue(BaseModel):
    """
    A single UX problem found on the scanned page.
    """
    __tablename__ = "ux_issues"

    scan_id = Column(String, ForeignKey("scans.id", ondelete="CASCADE"), nullable=False, index=True)

    category = Column(Enum(IssueCategory), nullable=False)
    severity = Column(Enum(IssueSeverity), nullable=False)

    title = Column(String(512), nullable=False)
    description = Column(Text, nullable=False)
    element = Column(Text, nullable=True)  # CSS selector or element description
    impact = Column(Text, nullable=False)

    # Base64 PNG crop around the affected region
    screenshot = Column(Text, nullable=True)

    # Element position for reference
    bounds_x = Column(Integer, nullable=True)
    bounds_y = Column(Integer, nullable=True)
    bounds_width = Column(Integer, nullable=True)
    bounds_height = Column(Integer, nullable=True)

    scan = relationship("Scan", back_populates="issues", lazy="select")

    __table_args__ = (
        Index('idx_ux_issues_category', 'category'),
        Index('idx_ux_issues_severity', 'severity'),
    )
