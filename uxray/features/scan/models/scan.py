from sqlalchemy import Column, String, Integer, DateTime, Text, Index, CheckConstraint, Enum
from sqlalchemy.orm import relationship
import enum

from uxray.platform.db.base import BaseModel


class ScanStatus(enum.Enum):
    """Scan lifecycle: pending -> completed | failed"""
    pending = "pending"
    completed = "completed"
    failed = "failed"


TERMINAL_STATUSES = {ScanStatus.completed, ScanStatus.failed}


class Scan(BaseModel):
    """
    One pipeline invocation for one URL and one caller.

    Written twice: once on creation (pending) and once on the terminal update.
    Owns its issues and recommendations; they are deleted with it.
    """
    __tablename__ = "scans"

    # Caller identity, authenticated upstream
    user_id = Column(String, nullable=False, index=True)

    url = Column(Text, nullable=False)

    status = Column(Enum(ScanStatus), default=ScanStatus.pending, nullable=False, index=True)

    # Results (null until completed)
    score = Column(Integer, nullable=True)  # 0-100
    issues_found = Column(Integer, default=0, nullable=False)
    recommendations_count = Column(Integer, default=0, nullable=False)
    summary = Column(Text, nullable=True)

    # created_at and updated_at inherited from BaseModel
    completed_at = Column(DateTime(timezone=True), nullable=True)

    issues = relationship(
        "UXIssue",
        back_populates="scan",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="select",
    )
    recommendations = relationship(
        "Recommendation",
        back_populates="scan",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="select",
    )

    __table_args__ = (
        CheckConstraint('score IS NULL OR (score >= 0 AND score <= 100)', name='check_scan_score_range'),
        Index('idx_scans_user_created', 'user_id', 'created_at'),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
