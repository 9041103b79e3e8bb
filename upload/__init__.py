# =============================================================================
# UPLOAD MODULE INITIALIZATION
# =============================================================================
# File: upload/__init__.py
# Description: Upload module exports
# =============================================================================

from upload.schemas import (
    ResourceResponse,
    BatchUploadResponse,
    ImageListResponse,
    BatchDeleteRequest,
    BatchDeleteResponse,
)
from upload.service import UploadService, ALLOWED_EXTENSIONS

__all__ = [
    "ResourceResponse",
    "BatchUploadResponse",
    "ImageListResponse",
    "BatchDeleteRequest",
    "BatchDeleteResponse",
    "UploadService",
    "ALLOWED_EXTENSIONS",
]
