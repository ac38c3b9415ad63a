# app/api/v1/endpoints/drafts.py

import uuid
import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, status, Query, Depends, Response

from app.api.deps import PageParams, ensure_owner_or_admin, get_current_user, get_page_params
from app.db import crud
from app.models.common import ApiResponse, PaginatedResponse, build_pagination
from app.models.draft import Draft, DraftCreate, DraftUpdate
from app.models.enums import DraftType
from app.models.user import User

logger = logging.getLogger(__name__)

# Drafts are private scratch state: listing, reading and saving only ever see the
# caller's own drafts. Update and delete go through the owner-or-admin gate.
router = APIRouter(
    prefix="/drafts",
    tags=["Drafts"]
)

async def _get_draft_or_404(draft_id: uuid.UUID) -> Draft:
    draft = await crud.get_draft_by_id(draft_id)
    if draft is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Draft not found")
    return draft

@router.get(
    "/",
    response_model=PaginatedResponse[Draft],
    summary="List the caller's drafts, most recently saved first",
)
async def read_drafts(
    paging: PageParams = Depends(get_page_params),
    draft_type: Optional[DraftType] = Query(None, alias="type"),
    current_user: User = Depends(get_current_user),
):
    drafts, total = await crud.get_drafts(
        interviewer_id=current_user.interviewer_id,
        page=paging.page,
        limit=paging.limit,
        draft_type=draft_type.value if draft_type else None,
    )
    return PaginatedResponse[Draft](
        message="Drafts retrieved successfully",
        data=drafts,
        pagination=build_pagination(total, paging.page, paging.limit),
    )

@router.get(
    "/{draft_id}",
    response_model=ApiResponse[Draft],
    summary="Get one of the caller's drafts",
)
async def read_draft(draft_id: uuid.UUID, current_user: User = Depends(get_current_user)):
    draft = await crud.get_draft_by_id(draft_id, interviewer_id=current_user.interviewer_id)
    if draft is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Draft not found")
    return ApiResponse[Draft](message="Draft retrieved successfully", data=draft)

@router.post(
    "/",
    response_model=ApiResponse[Draft],
    status_code=status.HTTP_201_CREATED,
    summary="Create a draft",
    description="Fails with 400 when the caller already has a draft with this draftId. Use /save to upsert."
)
async def create_new_draft(draft_in: DraftCreate, current_user: User = Depends(get_current_user)):
    if await crud.draft_exists(draft_in.draft_id, current_user.interviewer_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Draft ID already exists")
    try:
        draft = await crud.create_draft(draft_in, interviewer_id=current_user.interviewer_id)
    except crud.DuplicateRecordError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Draft ID already exists") from e
    return ApiResponse[Draft](message="Draft created successfully", data=draft)

@router.post(
    "/save",
    response_model=ApiResponse[Draft],
    summary="Create or overwrite a draft keyed on draftId",
    description="Repeated saves with the same draftId update the same record. Responds 201 on first save, 200 after."
)
async def save_draft(
    draft_in: DraftCreate,
    response: Response,
    current_user: User = Depends(get_current_user),
):
    draft, created = await crud.save_draft(draft_in, interviewer_id=current_user.interviewer_id)
    if created:
        response.status_code = status.HTTP_201_CREATED
        return ApiResponse[Draft](message="Draft created successfully", data=draft)
    return ApiResponse[Draft](message="Draft saved successfully", data=draft)

@router.put(
    "/{draft_id}",
    response_model=ApiResponse[Draft],
    summary="Replace a draft's data",
)
async def update_existing_draft(
    draft_id: uuid.UUID,
    draft_in: DraftUpdate,
    current_user: User = Depends(get_current_user),
):
    existing = await _get_draft_or_404(draft_id)
    ensure_owner_or_admin(current_user, existing.interviewer_id)

    updated = await crud.update_draft_data(draft_id, draft_in.data)
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Draft not found")
    logger.info(f"Draft {existing.draft_id} updated by {current_user.interviewer_id}")
    return ApiResponse[Draft](message="Draft updated successfully", data=updated)

@router.delete(
    "/{draft_id}",
    response_model=ApiResponse[None],
    summary="Delete a draft",
)
async def delete_existing_draft(draft_id: uuid.UUID, current_user: User = Depends(get_current_user)):
    existing = await _get_draft_or_404(draft_id)
    ensure_owner_or_admin(current_user, existing.interviewer_id)

    if not await crud.delete_draft(draft_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Draft not found")
    logger.info(f"Draft {existing.draft_id} deleted by {current_user.interviewer_id}")
    return ApiResponse[None](message="Draft deleted successfully")
