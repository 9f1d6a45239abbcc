from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, Index, Enum
from sqlalchemy.orm import relationship
import enum

from uxray.platform.db.base import BaseModel


class RecommendationPriority(enum.Enum):
    high = "high"
    medium = "medium"
    low = "low"


class RecommendationEffort(enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


class Recommendation(BaseModel):
    """
    Actionable improvement suggested for a scanned page.
    """
    __tablename__ = "recommendations"

    scan_id = Column(String, ForeignKey("scans.id", ondelete="CASCADE"), nullable=False, index=True)

    priority = Column(Enum(RecommendationPriority), nullable=False)
    effort = Column(Enum(RecommendationEffort), nullable=False)

    title = Column(String(512), nullable=False)
    description = Column(Text, nullable=False)
    implementation = Column(Text, nullable=False)  # How to implement the recommendation
    expected_impact = Column(Text, nullable=False)
    element = Column(Text, nullable=True)

    screenshot = Column(Text, nullable=True)

    is_implemented = Column(Boolean, default=False, nullable=False)
    implemented_at = Column(DateTime(timezone=True), nullable=True)

    scan = relationship("Scan", back_populates="recommendations", lazy="select")

    __table_args__ = (
        Index('idx_recommendations_priority', 'priority'),
        Index('idx_recommendations_effort', 'effort'),
    )
