# app/api/v1/endpoints/schools.py

import uuid
import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, status, Query, Depends

from app.api.deps import PageParams, ensure_owner_or_admin, get_age_range, get_current_user, get_page_params
from app.db import crud
from app.models.common import ApiResponse, PaginatedResponse, build_pagination
from app.models.enums import Gender, SchoolStatus
from app.models.school import School, SchoolCreate, SchoolUpdate
from app.models.student import StudentRow
from app.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/schools",
    tags=["Schools"]
)

SCHOOL_CODE_CONFLICT = "School code already exists"

def _enum_value(value):
    return value.value if value is not None else None

async def _get_school_or_404(school_id: uuid.UUID) -> School:
    school = await crud.get_school_by_id(school_id)
    if school is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="School not found")
    return school

@router.get(
    "/",
    response_model=PaginatedResponse[School],
    summary="List schools",
    description="Search over name, address and school code, filter by LGA, status and owner. Newest first."
)
async def read_schools(
    paging: PageParams = Depends(get_page_params),
    search: Optional[str] = Query(None),
    lga: Optional[str] = Query(None),
    school_status: Optional[SchoolStatus] = Query(None, alias="status"),
    interviewer_id: Optional[str] = Query(None, alias="interviewerId"),
    current_user: User = Depends(get_current_user),
):
    schools, total = await crud.get_schools(
        page=paging.page,
        limit=paging.limit,
        search=search,
        lga=lga,
        status=_enum_value(school_status),
        interviewer_id=interviewer_id,
    )
    return PaginatedResponse[School](
        message="Schools retrieved successfully",
        data=schools,
        pagination=build_pagination(total, paging.page, paging.limit),
    )

@router.get(
    "/my-schools",
    response_model=PaginatedResponse[School],
    summary="List the schools recorded by the caller",
)
async def read_my_schools(
    paging: PageParams = Depends(get_page_params),
    school_status: Optional[SchoolStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
):
    schools, total = await crud.get_schools(
        page=paging.page,
        limit=paging.limit,
        status=_enum_value(school_status),
        interviewer_id=current_user.interviewer_id,
    )
    return PaginatedResponse[School](
        message="Your schools retrieved successfully",
        data=schools,
        pagination=build_pagination(total, paging.page, paging.limit),
    )

@router.get(
    "/students",
    response_model=PaginatedResponse[StudentRow],
    summary="List students across all schools",
    description=(
        "School filters (search, lga, status, schoolId) select schools first; the embedded "
        "students are then flattened and filtered by gender, begging flag and age range."
    )
)
async def read_students(
    paging: PageParams = Depends(get_page_params),
    search: Optional[str] = Query(None),
    lga: Optional[str] = Query(None),
    school_status: Optional[SchoolStatus] = Query(None, alias="status"),
    school_id: Optional[uuid.UUID] = Query(None, alias="schoolId"),
    gender: Optional[Gender] = Query(None),
    is_begging: Optional[bool] = Query(None, alias="isBegging"),
    age_range: Optional[str] = Depends(get_age_range),
    current_user: User = Depends(get_current_user),
):
    students, total = await crud.get_students(
        page=paging.page,
        limit=paging.limit,
        search=search,
        lga=lga,
        status=_enum_value(school_status),
        school_id=school_id,
        gender=_enum_value(gender),
        is_begging=is_begging,
        age_range=age_range,
    )
    return PaginatedResponse[StudentRow](
        message="Students retrieved successfully",
        data=students,
        pagination=build_pagination(total, paging.page, paging.limit),
    )

@router.get(
    "/{school_id}",
    response_model=ApiResponse[School],
    summary="Get a school by ID",
)
async def read_school(school_id: uuid.UUID, current_user: User = Depends(get_current_user)):
    school = await _get_school_or_404(school_id)
    return ApiResponse[School](message="School retrieved successfully", data=school)

@router.post(
    "/",
    response_model=ApiResponse[School],
    status_code=status.HTTP_201_CREATED,
    summary="Create a school survey record",
    description="Owner is the caller and status starts as DRAFT. Fails with 400 when the school code is taken."
)
async def create_new_school(school_in: SchoolCreate, current_user: User = Depends(get_current_user)):
    """
    - **school_in**: full school record with head teacher, structure and at least one student.
    """
    logger.info(f"User {current_user.interviewer_id} attempting to create school {school_in.school_code}")
    if await crud.school_code_exists(school_in.school_code):
        logger.warning(f"School code {school_in.school_code} already exists")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SCHOOL_CODE_CONFLICT)

    try:
        school = await crud.create_school(school_in, interviewer_id=current_user.interviewer_id)
    except crud.DuplicateRecordError as e:
        logger.warning(f"Concurrent create of school code {school_in.school_code}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SCHOOL_CODE_CONFLICT) from e

    logger.info(f"School {school.school_code} ({school.id}) created by {current_user.interviewer_id}")
    return ApiResponse[School](message="School created successfully", data=school)

@router.put(
    "/{school_id}",
    response_model=ApiResponse[School],
    summary="Update a school",
    description="Partial update by the owner or an ADMIN. A changed school code is re-checked for uniqueness."
)
async def update_existing_school(
    school_id: uuid.UUID,
    school_in: SchoolUpdate,
    current_user: User = Depends(get_current_user),
):
    existing = await _get_school_or_404(school_id)
    ensure_owner_or_admin(current_user, existing.interviewer_id)

    if school_in.school_code and school_in.school_code != existing.school_code:
        if await crud.school_code_exists(school_in.school_code, exclude_id=school_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SCHOOL_CODE_CONFLICT)

    try:
        updated = await crud.update_school(school_id, school_in)
    except crud.DuplicateRecordError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SCHOOL_CODE_CONFLICT) from e
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="School not found")

    logger.info(f"School {school_id} updated by {current_user.interviewer_id}")
    return ApiResponse[School](message="School updated successfully", data=updated)

@router.delete(
    "/{school_id}",
    response_model=ApiResponse[None],
    summary="Delete a school",
)
async def delete_existing_school(school_id: uuid.UUID, current_user: User = Depends(get_current_user)):
    existing = await _get_school_or_404(school_id)
    ensure_owner_or_admin(current_user, existing.interviewer_id)

    if not await crud.delete_school(school_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="School not found")
    logger.info(f"School {existing.school_code} ({school_id}) deleted by {current_user.interviewer_id}")
    return ApiResponse[None](message="School deleted successfully")
