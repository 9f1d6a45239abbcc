import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import case, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from uxray.features.scan.models.recommendation import Recommendation
from uxray.features.scan.models.scan import Scan, ScanStatus
from uxray.features.scan.schemas.scan import (
    IssueDetail,
    Pagination,
    RecommendationDetail,
    ScanDetailResponse,
    ScanHistoryItem,
    ScanHistoryResponse,
    ScanStatsResponse,
)

logger = logging.getLogger(__name__)


def _enum_value(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


def _history_item(scan: Scan) -> dict:
    return {
        "id": scan.id,
        "url": scan.url,
        "status": _enum_value(scan.status),
        "score": scan.score,
        "issues_found": scan.issues_found or 0,
        "recommendations_count": scan.recommendations_count or 0,
        "summary": scan.summary,
        "created_at": scan.created_at,
        "completed_at": scan.completed_at,
    }


def _recommendation_detail(rec: Recommendation) -> RecommendationDetail:
    return RecommendationDetail(
        id=rec.id,
        priority=_enum_value(rec.priority),
        title=rec.title,
        description=rec.description,
        implementation=rec.implementation,
        expected_impact=rec.expected_impact,
        effort=_enum_value(rec.effort),
        element=rec.element,
        screenshot=rec.screenshot,
        is_implemented=rec.is_implemented,
        implemented_at=rec.implemented_at,
    )


async def get_user_scan_history(
    user_id: str, db: AsyncSession, limit: int = 10, offset: int = 0
) -> ScanHistoryResponse:
    try:
        total = await db.scalar(select(func.count(Scan.id)).where(Scan.user_id == user_id))

        query = (
            select(Scan)
            .where(Scan.user_id == user_id)
            .order_by(desc(Scan.created_at), desc(Scan.id))
            .limit(limit)
            .offset(offset)
        )
        result = await db.execute(query)
        scans = result.scalars().all()

        logger.info(f"Found {len(scans)} scans for user {user_id}")

        total = total or 0
        return ScanHistoryResponse(
            scans=[ScanHistoryItem(**_history_item(scan)) for scan in scans],
            pagination=Pagination(
                total=total,
                limit=limit,
                offset=offset,
                has_more=offset + limit < total,
            ),
        )

    except Exception as e:
        logger.error(f"Failed to fetch history for user {user_id}: {str(e)}")
        raise e


async def get_user_scan_stats(user_id: str, db: AsyncSession) -> ScanStatsResponse:
    completed = Scan.status == ScanStatus.completed
    query = select(
        func.count(Scan.id),
        func.coalesce(func.sum(case((completed, 1), else_=0)), 0),
        func.avg(case((completed, Scan.score), else_=None)),
        func.coalesce(func.sum(Scan.issues_found), 0),
        func.coalesce(func.sum(Scan.recommendations_count), 0),
    ).where(Scan.user_id == user_id)

    row = (await db.execute(query)).one()
    total_scans, completed_scans, avg_score, total_issues, total_recommendations = row

    month_start = datetime.now(timezone.utc).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    this_month_scans = await db.scalar(
        select(func.count(Scan.id)).where(Scan.user_id == user_id, Scan.created_at >= month_start)
    )

    return ScanStatsResponse(
        total_scans=total_scans or 0,
        completed_scans=completed_scans or 0,
        avg_score=round(float(avg_score), 1) if avg_score is not None else None,
        total_issues=int(total_issues or 0),
        total_recommendations=int(total_recommendations or 0),
        this_month_scans=this_month_scans or 0,
    )


async def get_scan_detail(scan_id: str, user_id: str, db: AsyncSession) -> Optional[ScanDetailResponse]:
    """Scan with its findings, or None when it does not exist or belongs to someone else."""
    query = (
        select(Scan)
        .where(Scan.id == scan_id, Scan.user_id == user_id)
        .options(selectinload(Scan.issues), selectinload(Scan.recommendations))
    )
    scan = (await db.execute(query)).scalar_one_or_none()
    if scan is None:
        logger.warning(f"Scan {scan_id} not found for user {user_id}")
        return None

    issues = [
        IssueDetail(
            id=issue.id,
            category=_enum_value(issue.category),
            severity=_enum_value(issue.severity),
            title=issue.title,
            description=issue.description,
            element=issue.element,
            impact=issue.impact,
            screenshot=issue.screenshot,
            bounds_x=issue.bounds_x,
            bounds_y=issue.bounds_y,
            bounds_width=issue.bounds_width,
            bounds_height=issue.bounds_height,
        )
        for issue in sorted(scan.issues, key=lambda item: item.id)
    ]
    recommendations = [
        _recommendation_detail(rec)
        for rec in sorted(scan.recommendations, key=lambda item: item.id)
    ]

    return ScanDetailResponse(**_history_item(scan), ux_issues=issues, recommendations=recommendations)


async def set_recommendation_implemented(
    scan_id: str, recommendation_id: str, user_id: str, is_implemented: bool, db: AsyncSession
) -> Optional[RecommendationDetail]:
    """Toggle the implemented flag on one of the caller's recommendations."""
    query = (
        select(Recommendation)
        .join(Scan, Recommendation.scan_id == Scan.id)
        .where(
            Recommendation.id == recommendation_id,
            Recommendation.scan_id == scan_id,
            Scan.user_id == user_id,
        )
    )
    rec = (await db.execute(query)).scalar_one_or_none()
    if rec is None:
        logger.warning(f"Recommendation {recommendation_id} not found on scan {scan_id} for user {user_id}")
        return None

    rec.is_implemented = is_implemented
    rec.implemented_at = datetime.now(timezone.utc) if is_implemented else None
    await db.commit()
    await db.refresh(rec)

    logger.info(f"Recommendation {recommendation_id} marked implemented={is_implemented}")
    return _recommendation_detail(rec)
