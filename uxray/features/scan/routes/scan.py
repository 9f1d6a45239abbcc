from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from uxray.features.auth.utils.security import get_current_user_id
from uxray.features.scan.schemas.scan import RecommendationUpdateRequest, ScanStartRequest
from uxray.features.scan.services.orchestration.history import (
    get_scan_detail,
    get_user_scan_history,
    get_user_scan_stats,
    set_recommendation_implemented,
)
from uxray.features.scan.services.orchestration.scan_orchestrator import ScanOrchestrator
from uxray.platform.db.session import get_db, get_sync_db
from uxray.platform.logger import get_logger
from uxray.platform.response import api_response

logger = get_logger(__name__)

router = APIRouter(prefix="/scans", tags=["scans"])


def get_scan_orchestrator(db: Session = Depends(get_sync_db)) -> ScanOrchestrator:
    return ScanOrchestrator(db)


@router.post("", status_code=status.HTTP_200_OK)
def start_scan(
    request: ScanStartRequest,
    current_user_id: str = Depends(get_current_user_id),
    orchestrator: ScanOrchestrator = Depends(get_scan_orchestrator),
):
    """
    Scan a single page and wait for the result.

    Runs in FastAPI's threadpool since the browser and the reasoning
    service calls are blocking. Missing url/user_id is a 400; a user_id that
    is not the token's subject is a 401.
    """
    if request.user_id and request.user_id != current_user_id:
        logger.warning(f"Caller {current_user_id} attempted a scan as {request.user_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )

    result = orchestrator.run_scan(request.url, request.user_id)

    message = "Scan completed" if result.status == "completed" else "Scan failed"
    return api_response(data=result, message=message)


@router.get("")
async def get_scan_history(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Past scans for the caller, newest first."""
    logger.info(f"User {current_user_id} fetching scan history (limit={limit}, offset={offset})")

    history = await get_user_scan_history(user_id=current_user_id, db=db, limit=limit, offset=offset)
    return api_response(data=history)


@router.get("/stats")
async def get_scan_stats(
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    stats = await get_user_scan_stats(user_id=current_user_id, db=db)
    return api_response(data=stats)


@router.get("/{scan_id}")
async def get_scan(
    scan_id: str,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    detail = await get_scan_detail(scan_id=scan_id, user_id=current_user_id, db=db)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Scan not found")
    return api_response(data=detail)


@router.patch("/{scan_id}/recommendations/{recommendation_id}")
async def update_recommendation(
    scan_id: str,
    recommendation_id: str,
    request: RecommendationUpdateRequest,
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Mark a recommendation as implemented (or not)."""
    rec = await set_recommendation_implemented(
        scan_id=scan_id,
        recommendation_id=recommendation_id,
        user_id=current_user_id,
        is_implemented=request.is_implemented,
        db=db,
    )
    if rec is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recommendation not found")
    return api_response(data=rec, message="Recommendation updated")
