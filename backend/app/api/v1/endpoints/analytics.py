# app/api/v1/endpoints/analytics.py

import logging
from typing import Optional
from fastapi import APIRouter, Query, Depends

from app.api.deps import require_supervisor
from app.db import statistics
from app.models.analytics import BeggarStatistics, DashboardData, InterviewerStatistics, SchoolStatistics
from app.models.common import ApiResponse
from app.models.enums import SchoolStatus
from app.models.user import User

logger = logging.getLogger(__name__)

# All statistics are read-only and restricted to SUPERVISOR and ADMIN accounts
router = APIRouter(
    prefix="/analytics",
    tags=["Analytics"]
)

@router.get(
    "/schools",
    response_model=ApiResponse[SchoolStatistics],
    summary="School and student statistics",
    description="Counts by status and LGA, embedded student totals, begging rate and facility counts."
)
async def read_school_statistics(
    lga: Optional[str] = Query(None),
    school_status: Optional[SchoolStatus] = Query(None, alias="status"),
    current_user: User = Depends(require_supervisor),
):
    logger.info(f"User {current_user.interviewer_id} requested school statistics (lga={lga}, status={school_status})")
    data = await statistics.get_school_statistics(
        lga=lga, status=school_status.value if school_status else None
    )
    return ApiResponse[SchoolStatistics](message="School statistics retrieved successfully", data=data)

@router.get(
    "/beggars",
    response_model=ApiResponse[BeggarStatistics],
    summary="Beggar statistics",
    description="Active split, age histogram and gender, LGA, state and nationality distributions."
)
async def read_beggar_statistics(
    lga: Optional[str] = Query(None),
    state_of_origin: Optional[str] = Query(None, alias="stateOfOrigin"),
    current_user: User = Depends(require_supervisor),
):
    logger.info(f"User {current_user.interviewer_id} requested beggar statistics (lga={lga}, state={state_of_origin})")
    data = await statistics.get_beggar_statistics(lga=lga, state_of_origin=state_of_origin)
    return ApiResponse[BeggarStatistics](message="Beggar statistics retrieved successfully", data=data)

@router.get(
    "/dashboard",
    response_model=ApiResponse[DashboardData],
    summary="Dashboard totals, recent activity and top LGAs",
)
async def read_dashboard(current_user: User = Depends(require_supervisor)):
    data = await statistics.get_dashboard_data()
    return ApiResponse[DashboardData](message="Dashboard data retrieved successfully", data=data)

@router.get(
    "/interviewer/{interviewer_id}",
    response_model=ApiResponse[InterviewerStatistics],
    summary="Statistics for one interviewer's records",
)
async def read_interviewer_statistics(
    interviewer_id: str,
    current_user: User = Depends(require_supervisor),
):
    data = await statistics.get_interviewer_statistics(interviewer_id)
    return ApiResponse[InterviewerStatistics](message="Interviewer statistics retrieved successfully", data=data)
