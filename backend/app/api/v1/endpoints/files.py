# app/api/v1/endpoints/files.py

import uuid
import time
import secrets
import logging
from typing import Optional
from urllib.parse import quote
from fastapi import (
    APIRouter, HTTPException, status, Query, Depends, Response,
    UploadFile, File, Form
)

from app.api.deps import PageParams, ensure_owner_or_admin, get_current_user, get_page_params
from app.core.config import settings
from app.db import crud
from app.models.common import ApiResponse, PaginatedResponse, build_pagination
from app.models.enums import RelatedToType
from app.models.file import FileRecord, FileRecordCreate, RelatedTo
from app.models.user import User
from app.services.blob_storage import upload_file_to_blob, download_blob_as_bytes, delete_blob

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/files",
    tags=["Files"]
)

def generate_file_id() -> str:
    """Logical identifier of the form FILE_<epoch-ms>_<9 hex chars>."""
    return f"FILE_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"

def content_disposition(filename: str) -> str:
    # RFC 6266: ASCII fallback plus the UTF-8 encoded original name
    fallback = filename.encode("ascii", "ignore").decode("ascii").replace('"', "") or "download"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"

async def _get_file_or_404(file_id: uuid.UUID) -> FileRecord:
    record = await crud.get_file_by_id(file_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return record

@router.post(
    "/upload",
    response_model=ApiResponse[FileRecord],
    status_code=status.HTTP_201_CREATED,
    summary="Upload an attachment",
    description="Stores the file in blob storage under a generated name and records its metadata. "
                "Optionally links it to a school, beggar or user."
)
async def upload_file(
    file: UploadFile = File(..., description="Image or spreadsheet to attach"),
    related_to_type: Optional[RelatedToType] = Form(None, alias="relatedToType"),
    related_to_id: Optional[str] = Form(None, alias="relatedToId"),
    current_user: User = Depends(get_current_user),
):
    original_name = file.filename or "unknown_file"
    logger.info(f"User {current_user.interviewer_id} attempting to upload '{original_name}' ({file.content_type})")

    if file.content_type not in settings.ALLOWED_FILE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"File type {file.content_type} is not allowed",
        )

    # Read one byte past the ceiling so oversized uploads are detected without buffering them whole
    data = await file.read(settings.MAX_FILE_SIZE + 1)
    if len(data) > settings.MAX_FILE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the maximum size of {settings.MAX_FILE_SIZE} bytes",
        )

    stored = await upload_file_to_blob(data, original_name, file.content_type)
    if stored is None:
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to upload file to storage.")

    related_to = None
    if related_to_type and related_to_id:
        related_to = RelatedTo(type=related_to_type, id=related_to_id)

    record_in = FileRecordCreate(
        file_id=generate_file_id(),
        original_name=original_name,
        filename=stored.name,
        mimetype=file.content_type,
        size=len(data),
        path=stored.name,
        url=stored.url,
        uploaded_by=current_user.interviewer_id,
        related_to=related_to,
    )
    try:
        record = await crud.create_file_record(record_in)
    except crud.DuplicateRecordError:
        logger.error(f"File ID collision for {record_in.file_id}; removing orphaned blob {stored.name}")
        await delete_blob(stored.name)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to save file metadata after upload.")

    logger.info(f"File {record.file_id} uploaded by {current_user.interviewer_id} as blob {stored.name}")
    return ApiResponse[FileRecord](message="File uploaded successfully", data=record)

@router.get(
    "/my-files",
    response_model=PaginatedResponse[FileRecord],
    summary="List the caller's uploads",
)
async def read_my_files(
    paging: PageParams = Depends(get_page_params),
    related_to_type: Optional[RelatedToType] = Query(None, alias="relatedToType"),
    related_to_id: Optional[str] = Query(None, alias="relatedToId"),
    current_user: User = Depends(get_current_user),
):
    files, total = await crud.get_files_by_uploader(
        uploaded_by=current_user.interviewer_id,
        page=paging.page,
        limit=paging.limit,
        related_type=related_to_type.value if related_to_type else None,
        related_id=related_to_id,
    )
    return PaginatedResponse[FileRecord](
        message="Files retrieved successfully",
        data=files,
        pagination=build_pagination(total, paging.page, paging.limit),
    )

@router.get(
    "/{file_id}",
    response_model=ApiResponse[FileRecord],
    summary="Get file metadata",
)
async def read_file(file_id: uuid.UUID, current_user: User = Depends(get_current_user)):
    record = await _get_file_or_404(file_id)
    return ApiResponse[FileRecord](message="File retrieved successfully", data=record)

@router.get(
    "/{file_id}/download",
    summary="Download a file",
    response_class=Response,
    responses={200: {"content": {"application/octet-stream": {}}}, 404: {"description": "Record or stored bytes missing"}},
)
async def download_file(file_id: uuid.UUID, current_user: User = Depends(get_current_user)):
    record = await _get_file_or_404(file_id)
    file_bytes = await download_blob_as_bytes(record.filename)
    if file_bytes is None:
        logger.warning(f"Blob {record.filename} for file {record.file_id} is missing from storage")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found on storage")

    return Response(
        content=file_bytes,
        media_type=record.mimetype,
        headers={"Content-Disposition": content_disposition(record.original_name)},
    )

@router.delete(
    "/{file_id}",
    response_model=ApiResponse[None],
    summary="Delete a file and its stored bytes",
)
async def delete_file(file_id: uuid.UUID, current_user: User = Depends(get_current_user)):
    record = await _get_file_or_404(file_id)
    ensure_owner_or_admin(current_user, record.uploaded_by)

    if not await delete_blob(record.filename):
        # Metadata still goes; the orphaned blob is only logged
        logger.error(f"Could not delete blob {record.filename} for file {record.file_id}")
    await crud.delete_file_record(file_id)
    logger.info(f"File {record.file_id} deleted by {current_user.interviewer_id}")
    return ApiResponse[None](message="File deleted successfully")
