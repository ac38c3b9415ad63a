# app/api/v1/endpoints/beggars.py

import uuid
import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, status, Query, Depends

from app.api.deps import PageParams, ensure_owner_or_admin, get_age_range, get_current_user, get_page_params
from app.db import crud, statistics
from app.models.analytics import BeggarPageWithStatistics
from app.models.beggar import Beggar, BeggarCreate, BeggarUpdate
from app.models.common import ApiResponse, PaginatedResponse, build_pagination
from app.models.enums import Gender
from app.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/beggars",
    tags=["Beggars"]
)

BEGGAR_ID_CONFLICT = "Beggar ID already exists"

async def _get_beggar_or_404(beggar_id: uuid.UUID) -> Beggar:
    beggar = await crud.get_beggar_by_id(beggar_id)
    if beggar is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Beggar not found")
    return beggar

@router.get(
    "/",
    response_model=PaginatedResponse[Beggar],
    summary="List beggars",
    description="Search over name and beggar ID, filter by LGA, state of origin, begging flag, owner, sex and age range."
)
async def read_beggars(
    paging: PageParams = Depends(get_page_params),
    search: Optional[str] = Query(None),
    lga: Optional[str] = Query(None),
    state_of_origin: Optional[str] = Query(None, alias="stateOfOrigin"),
    is_begging: Optional[bool] = Query(None, alias="isBegging"),
    interviewer_id: Optional[str] = Query(None, alias="interviewerId"),
    gender: Optional[Gender] = Query(None),
    age_range: Optional[str] = Depends(get_age_range),
    current_user: User = Depends(get_current_user),
):
    beggars, total = await crud.get_beggars(
        page=paging.page,
        limit=paging.limit,
        search=search,
        lga=lga,
        state_of_origin=state_of_origin,
        is_begging=is_begging,
        interviewer_id=interviewer_id,
        sex=gender.value if gender else None,
        age_range=age_range,
    )
    return PaginatedResponse[Beggar](
        message="Beggars retrieved successfully",
        data=beggars,
        pagination=build_pagination(total, paging.page, paging.limit),
    )

@router.get(
    "/my-beggars",
    response_model=PaginatedResponse[Beggar],
    summary="List the beggars recorded by the caller",
)
async def read_my_beggars(
    paging: PageParams = Depends(get_page_params),
    is_begging: Optional[bool] = Query(None, alias="isBegging"),
    current_user: User = Depends(get_current_user),
):
    beggars, total = await crud.get_beggars(
        page=paging.page,
        limit=paging.limit,
        is_begging=is_begging,
        interviewer_id=current_user.interviewer_id,
    )
    return PaginatedResponse[Beggar](
        message="Your beggars retrieved successfully",
        data=beggars,
        pagination=build_pagination(total, paging.page, paging.limit),
    )

@router.get(
    "/with-stats",
    response_model=BeggarPageWithStatistics,
    summary="List beggars together with summary statistics for the same filter",
)
async def read_beggars_with_stats(
    paging: PageParams = Depends(get_page_params),
    search: Optional[str] = Query(None),
    lga: Optional[str] = Query(None),
    state_of_origin: Optional[str] = Query(None, alias="stateOfOrigin"),
    is_begging: Optional[bool] = Query(None, alias="isBegging"),
    interviewer_id: Optional[str] = Query(None, alias="interviewerId"),
    gender: Optional[Gender] = Query(None),
    age_range: Optional[str] = Depends(get_age_range),
    current_user: User = Depends(get_current_user),
):
    filters = dict(
        search=search,
        lga=lga,
        state_of_origin=state_of_origin,
        is_begging=is_begging,
        interviewer_id=interviewer_id,
        sex=gender.value if gender else None,
        age_range=age_range,
    )
    beggars, total = await crud.get_beggars(page=paging.page, limit=paging.limit, **filters)
    summary = await statistics.get_beggar_list_statistics(crud.build_beggar_query(**filters))
    return BeggarPageWithStatistics(
        message="Beggars retrieved successfully",
        data=beggars,
        pagination=build_pagination(total, paging.page, paging.limit),
        statistics=summary,
    )

@router.get(
    "/{beggar_id}",
    response_model=ApiResponse[Beggar],
    summary="Get a beggar record by ID",
)
async def read_beggar(beggar_id: uuid.UUID, current_user: User = Depends(get_current_user)):
    beggar = await _get_beggar_or_404(beggar_id)
    return ApiResponse[Beggar](message="Beggar retrieved successfully", data=beggar)

@router.post(
    "/",
    response_model=ApiResponse[Beggar],
    status_code=status.HTTP_201_CREATED,
    summary="Create a beggar survey record",
)
async def create_new_beggar(beggar_in: BeggarCreate, current_user: User = Depends(get_current_user)):
    logger.info(f"User {current_user.interviewer_id} attempting to create beggar {beggar_in.beggar_id}")
    if await crud.beggar_id_exists(beggar_in.beggar_id):
        logger.warning(f"Beggar ID {beggar_in.beggar_id} already exists")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=BEGGAR_ID_CONFLICT)

    try:
        beggar = await crud.create_beggar(beggar_in, interviewer_id=current_user.interviewer_id)
    except crud.DuplicateRecordError as e:
        logger.warning(f"Concurrent create of beggar ID {beggar_in.beggar_id}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=BEGGAR_ID_CONFLICT) from e

    logger.info(f"Beggar {beggar.beggar_id} ({beggar.id}) created by {current_user.interviewer_id}")
    return ApiResponse[Beggar](message="Beggar created successfully", data=beggar)

@router.put(
    "/{beggar_id}",
    response_model=ApiResponse[Beggar],
    summary="Update a beggar record",
    description="Partial update by the owner or an ADMIN. A changed beggar ID is re-checked for uniqueness."
)
async def update_existing_beggar(
    beggar_id: uuid.UUID,
    beggar_in: BeggarUpdate,
    current_user: User = Depends(get_current_user),
):
    existing = await _get_beggar_or_404(beggar_id)
    ensure_owner_or_admin(current_user, existing.interviewer_id)

    if beggar_in.beggar_id and beggar_in.beggar_id != existing.beggar_id:
        if await crud.beggar_id_exists(beggar_in.beggar_id, exclude_id=beggar_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=BEGGAR_ID_CONFLICT)

    try:
        updated = await crud.update_beggar(beggar_id, beggar_in)
    except crud.DuplicateRecordError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=BEGGAR_ID_CONFLICT) from e
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Beggar not found")

    logger.info(f"Beggar {beggar_id} updated by {current_user.interviewer_id}")
    return ApiResponse[Beggar](message="Beggar updated successfully", data=updated)

@router.delete(
    "/{beggar_id}",
    response_model=ApiResponse[None],
    summary="Delete a beggar record",
)
async def delete_existing_beggar(beggar_id: uuid.UUID, current_user: User = Depends(get_current_user)):
    existing = await _get_beggar_or_404(beggar_id)
    ensure_owner_or_admin(current_user, existing.interviewer_id)

    if not await crud.delete_beggar(beggar_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Beggar not found")
    logger.info(f"Beggar {existing.beggar_id} ({beggar_id}) deleted by {current_user.interviewer_id}")
    return ApiResponse[None](message="Beggar deleted successfully")
