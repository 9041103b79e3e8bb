# =============================================================================
# USERHUB BACKEND - UPLOAD SCHEMAS
# =============================================================================
# File: upload/schemas.py
# Description: Request/response models for file upload endpoints
# =============================================================================

from typing import List, Literal, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


UploadType = Literal["default", "image", "document", "audio", "video"]


class ResourceResponse(BaseModel):
    """Stored file metadata plus its public URL."""
    model_config = ConfigDict(from_attributes=True)

    resource_id: str
    name: str
    original_name: str
    type: str
    format: str
    size: int
    user_id: Optional[str] = None
    url: str
    created_at: Optional[datetime] = None


class UploadError(BaseModel):
    """Why one file of a batch was rejected."""
    original_name: str
    error_code: str
    message: str


class BatchUploadResponse(BaseModel):
    status: Literal["success", "partial"]
    message: str
    uploaded: List[ResourceResponse] = Field(default_factory=list)
    errors: List[UploadError] = Field(default_factory=list)


class ImageListResponse(BaseModel):
    items: List[ResourceResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class BatchDeleteRequest(BaseModel):
    resource_ids: List[str] = Field(..., min_length=1, max_length=100)


class DeleteResult(BaseModel):
    resource_id: str
    deleted: bool
    message: str


class BatchDeleteResponse(BaseModel):
    total: int
    deleted: int
    failed: int
    results: List[DeleteResult]
