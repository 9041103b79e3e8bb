# =============================================================================
# USERHUB BACKEND - UPLOAD ROUTES
# =============================================================================
# File: api/v1/upload_routes.py
# Description: File upload, image listing and resource deletion endpoints
# =============================================================================

from typing import List, Optional

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from auth.dependencies import CurrentAuth, UploadServiceDep
from upload.schemas import (
    BatchDeleteRequest,
    BatchDeleteResponse,
    BatchUploadResponse,
    DeleteResult,
    ImageListResponse,
    ResourceResponse,
    UploadType,
)


router = APIRouter(prefix="/upload", tags=["Upload"])


# =============================================================================
# UPLOAD
# =============================================================================

@router.post(
    "/single",
    response_model=ResourceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload one file",
)
async def upload_single_file(
    auth: CurrentAuth,
    upload_service: UploadServiceDep,
    file: UploadFile = File(...),
    upload_type: UploadType = Form("default", alias="type"),
) -> ResourceResponse:
    """
    Upload a single file (max 10 MB).

    - **type**: default, image, document, audio or video; restricts extensions
    """
    return await upload_service.handle_single_upload(file, upload_type, auth.user_id)


@router.post(
    "/batch",
    response_model=BatchUploadResponse,
    summary="Upload several files",
    description="Files that fail validation are reported individually.",
)
async def upload_batch_files(
    auth: CurrentAuth,
    upload_service: UploadServiceDep,
    files: List[UploadFile] = File(...),
    upload_type: UploadType = Form("default", alias="type"),
    limit: Optional[int] = Query(None, ge=1),
) -> BatchUploadResponse:
    return await upload_service.handle_batch_upload(
        files, upload_type, auth.user_id, limit=limit
    )


# =============================================================================
# LISTING
# =============================================================================

@router.get(
    "/images",
    response_model=ImageListResponse,
    summary="List uploaded images",
)
async def get_images(
    upload_service: UploadServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> ImageListResponse:
    return await upload_service.get_images(page=page, limit=limit)


# =============================================================================
# DELETION
# =============================================================================

@router.delete(
    "/file/{resource_id}",
    response_model=DeleteResult,
    summary="Delete a file",
)
async def delete_file(
    resource_id: str,
    auth: CurrentAuth,
    upload_service: UploadServiceDep,
) -> DeleteResult:
    return await upload_service.delete_file(resource_id, auth.user_id, auth.is_admin)


@router.delete(
    "/files/batch",
    response_model=BatchDeleteResponse,
    summary="Delete several files",
)
async def batch_delete_files(
    body: BatchDeleteRequest,
    auth: CurrentAuth,
    upload_service: UploadServiceDep,
) -> BatchDeleteResponse:
    return await upload_service.batch_delete(body.resource_ids, auth.user_id, auth.is_admin)
