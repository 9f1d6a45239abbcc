from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from uxray.features.scan.models import (
    IssueCategory,
    IssueSeverity,
    Recommendation,
    RecommendationEffort,
    RecommendationPriority,
    Scan,
    ScanStatus,
    UXIssue,
)
from uxray.features.scan.services.orchestration.history import (
    get_scan_detail,
    get_user_scan_history,
    get_user_scan_stats,
    set_recommendation_implemented,
)
from uxray.platform.db.base import Base

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest_asyncio.fixture
async def db():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def scans(db):
    now = datetime.now(timezone.utc)
    rows = [
        Scan(id="scan-1", user_id=USER_ID, url="https://a.example.com", status=ScanStatus.completed,
             score=80, issues_found=2, recommendations_count=1, summary="A", created_at=now - timedelta(seconds=3)),
        Scan(id="scan-2", user_id=USER_ID, url="https://b.example.com", status=ScanStatus.failed,
             created_at=now - timedelta(seconds=2)),
        Scan(id="scan-3", user_id=USER_ID, url="https://c.example.com", status=ScanStatus.completed,
             score=61, issues_found=1, recommendations_count=3, summary="C", created_at=now - timedelta(seconds=1)),
        Scan(id="scan-4", user_id=OTHER_USER_ID, url="https://d.example.com", status=ScanStatus.completed,
             score=10, issues_found=9, recommendations_count=9, created_at=now),
    ]
    db.add_all(rows)
    db.add(UXIssue(
        id="issue-1", scan_id="scan-1", category=IssueCategory.layout, severity=IssueSeverity.high,
        title="Crowded nav", description="Too many links", impact="Hard to scan",
        bounds_x=0, bounds_y=0, bounds_width=1920, bounds_height=80,
    ))
    db.add(Recommendation(
        id="rec-1", scan_id="scan-1", priority=RecommendationPriority.high, effort=RecommendationEffort.low,
        title="Trim nav", description="Fewer items", implementation="Group links",
        expected_impact="Faster wayfinding",
    ))
    await db.commit()
    return rows


class TestScanHistory:
    @pytest.mark.asyncio
    async def test_newest_first_with_pagination(self, db, scans):
        history = await get_user_scan_history(USER_ID, db, limit=2, offset=0)

        assert [item.id for item in history.scans] == ["scan-3", "scan-2"]
        assert history.pagination.total == 3
        assert history.pagination.has_more is True

        page_two = await get_user_scan_history(USER_ID, db, limit=2, offset=2)
        assert [item.id for item in page_two.scans] == ["scan-1"]
        assert page_two.pagination.has_more is False

    @pytest.mark.asyncio
    async def test_only_callers_scans(self, db, scans):
        history = await get_user_scan_history(OTHER_USER_ID, db)
        assert [item.id for item in history.scans] == ["scan-4"]
        assert history.scans[0].status == "completed"


class TestScanStats:
    @pytest.mark.asyncio
    async def test_stats(self, db, scans):
        stats = await get_user_scan_stats(USER_ID, db)

        assert stats.total_scans == 3
        assert stats.completed_scans == 2
        assert stats.avg_score == 70.5
        assert stats.total_issues == 3
        assert stats.total_recommendations == 4
        assert stats.this_month_scans == 3

    @pytest.mark.asyncio
    async def test_stats_without_scans(self, db):
        stats = await get_user_scan_stats("nobody", db)

        assert stats.total_scans == 0
        assert stats.completed_scans == 0
        assert stats.avg_score is None


class TestScanDetail:
    @pytest.mark.asyncio
    async def test_detail_includes_findings(self, db, scans):
        detail = await get_scan_detail("scan-1", USER_ID, db)

        assert detail.url == "https://a.example.com"
        assert detail.ux_issues[0].category == "layout"
        assert detail.ux_issues[0].bounds_height == 80
        assert detail.recommendations[0].priority == "high"
        assert detail.recommendations[0].is_implemented is False

    @pytest.mark.asyncio
    async def test_other_callers_scan_is_hidden(self, db, scans):
        assert await get_scan_detail("scan-1", OTHER_USER_ID, db) is None
        assert await get_scan_detail("missing", USER_ID, db) is None


class TestRecommendationToggle:
    @pytest.mark.asyncio
    async def test_mark_and_unmark_implemented(self, db, scans):
        rec = await set_recommendation_implemented("scan-1", "rec-1", USER_ID, True, db)
        assert rec.is_implemented is True
        assert rec.implemented_at is not None

        rec = await set_recommendation_implemented("scan-1", "rec-1", USER_ID, False, db)
        assert rec.is_implemented is False
        assert rec.implemented_at is None

    @pytest.mark.asyncio
    async def test_cannot_toggle_someone_elses_recommendation(self, db, scans):
        assert await set_recommendation_implemented("scan-1", "rec-1", OTHER_USER_ID, True, db) is None
        assert await set_recommendation_implemented("scan-2", "rec-1", USER_ID, True, db) is None
