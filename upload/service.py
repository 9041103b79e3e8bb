# =============================================================================
# USERHUB BACKEND - UPLOAD SERVICE
# =============================================================================
# File: upload/service.py
# Description: Validates, stores and deletes uploaded files and keeps their
#              Resource rows in step
# =============================================================================

from typing import Dict, FrozenSet, List, Optional, Sequence
from pathlib import Path
import asyncio
import logging
import math

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings
from core.exceptions import (
    FileTooLargeError,
    FileTypeNotAllowedError,
    PermissionDeniedError,
    ResourceNotFoundError,
    TooManyFilesError,
)
from core.security import generate_resource_id
from db.models import Resource, ResourceStatus
from upload.repository import ResourceRepository
from upload.schemas import (
    BatchDeleteResponse,
    BatchUploadResponse,
    DeleteResult,
    ImageListResponse,
    ResourceResponse,
    UploadError,
)


logger = logging.getLogger(__name__)

# None means any extension is accepted
ALLOWED_EXTENSIONS: Dict[str, Optional[FrozenSet[str]]] = {
    "image": frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"}),
    "document": frozenset({".pdf", ".doc", ".docx", ".txt", ".xlsx", ".xls"}),
    "audio": frozenset({".mp3", ".wav", ".ogg"}),
    "video": frozenset({".mp4", ".avi", ".mov", ".wmv"}),
    "default": None,
}

READ_CHUNK_SIZE = 64 * 1024


class UploadService:
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    UPLOAD SERVICE                                        │
    │  Files land in {upload_dir}/{type}/{random name}{ext}                  │
    │  and are addressed publicly by resource_id only                         │
    └─────────────────────────────────────────────────────────────────────────┘
    """

    def __init__(self, session: AsyncSession, settings: Settings):
        self._repo = ResourceRepository(session)
        self._root = Path(settings.upload_dir)
        self._url_prefix = settings.upload_url_prefix
        self._max_size = settings.upload_max_file_size
        self._max_batch = settings.upload_max_batch

    # =========================================================================
    # HELPERS
    # =========================================================================

    def file_url(self, upload_type: str, name: str) -> str:
        """Public URL under which StaticFiles serves the stored file."""
        return f"{self._url_prefix}/{upload_type}/{name}"

    def _to_response(self, resource: Resource) -> ResourceResponse:
        return ResourceResponse(
            resource_id=resource.resource_id,
            name=resource.name,
            original_name=resource.original_name,
            type=resource.type,
            format=resource.format,
            size=resource.size,
            user_id=resource.user_id,
            url=self.file_url(resource.type, resource.name),
            created_at=resource.created_at,
        )

    @staticmethod
    def check_extension(filename: str, upload_type: str) -> str:
        """
        Return the lower-cased extension of ``filename``.

        Raises:
            FileTypeNotAllowedError: If the extension is not allowed for the type
        """
        extension = Path(filename).suffix.lower()
        allowed = ALLOWED_EXTENSIONS[upload_type]
        if allowed is not None and extension not in allowed:
            raise FileTypeNotAllowedError(extension, upload_type)
        return extension

    async def _read_limited(self, file: UploadFile) -> bytes:
        """Read the upload, stopping as soon as it exceeds the size limit."""
        chunks: List[bytes] = []
        size = 0
        while True:
            chunk = await file.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > self._max_size:
                raise FileTooLargeError(size, self._max_size)
            chunks.append(chunk)
        return b"".join(chunks)

    # =========================================================================
    # UPLOAD
    # =========================================================================

    async def handle_single_upload(
        self,
        file: UploadFile,
        upload_type: str,
        user_id: Optional[str],
    ) -> ResourceResponse:
        """
        Validate and store one file.

        Raises:
            FileTypeNotAllowedError: Extension not allowed for ``upload_type``
            FileTooLargeError: File larger than the configured limit
        """
        original_name = Path(file.filename or "unnamed").name
        extension = self.check_extension(original_name, upload_type)
        content = await self._read_limited(file)

        name = f"{generate_resource_id()}{extension}"
        target_dir = self._root / upload_type
        target = target_dir / name

        await asyncio.to_thread(target_dir.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(target.write_bytes, content)

        try:
            resource = await self._repo.create(
                resource_id=generate_resource_id(),
                name=name,
                original_name=original_name,
                path=str(target),
                type=upload_type,
                format=extension.lstrip("."),
                size=len(content),
                user_id=user_id,
                status=ResourceStatus.ENABLED,
            )
        except Exception:
            target.unlink(missing_ok=True)
            raise

        logger.info(f"Stored {original_name} as {target} ({len(content)} bytes)")
        return self._to_response(resource)

    async def handle_batch_upload(
        self,
        files: Sequence[UploadFile],
        upload_type: str,
        user_id: Optional[str],
        limit: Optional[int] = None,
    ) -> BatchUploadResponse:
        """
        Store several files, reporting per-file failures instead of aborting.

        Raises:
            TooManyFilesError: If more files than ``limit`` (capped at the
                               configured batch maximum) were sent
        """
        max_files = min(limit or self._max_batch, self._max_batch)
        if len(files) > max_files:
            raise TooManyFilesError(len(files), max_files)

        uploaded: List[ResourceResponse] = []
        errors: List[UploadError] = []
        for file in files:
            try:
                uploaded.append(await self.handle_single_upload(file, upload_type, user_id))
            except (FileTypeNotAllowedError, FileTooLargeError) as e:
                errors.append(UploadError(
                    original_name=file.filename or "unnamed",
                    error_code=e.error_code,
                    message=e.message,
                ))

        if errors:
            status, message = "partial", (
                f"Some files failed. Uploaded: {len(uploaded)}, failed: {len(errors)}"
            )
        else:
            status, message = "success", f"Uploaded {len(uploaded)} file(s)"

        return BatchUploadResponse(
            status=status,
            message=message,
            uploaded=uploaded,
            errors=errors,
        )

    # =========================================================================
    # LISTING
    # =========================================================================

    async def get_images(self, page: int = 1, limit: int = 10) -> ImageListResponse:
        """Paginated listing of enabled image resources."""
        items = await self._repo.list_by_type("image", offset=(page - 1) * limit, limit=limit)
        total = await self._repo.count_by_type("image")
        return ImageListResponse(
            items=[self._to_response(r) for r in items],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if total else 0,
        )

    # =========================================================================
    # DELETION
    # =========================================================================

    async def delete_file(
        self,
        resource_id: str,
        actor_id: str,
        actor_is_admin: bool = False,
    ) -> DeleteResult:
        """
        Mark a resource deleted and remove its file from disk.

        Raises:
            ResourceNotFoundError: Unknown or already deleted resource
            PermissionDeniedError: Actor is neither the owner nor an admin
        """
        resource = await self._repo.get_by_resource_id(resource_id)
        if resource is None or resource.status == ResourceStatus.DELETED:
            raise ResourceNotFoundError("File", resource_id)
        if resource.user_id != actor_id and not actor_is_admin:
            raise PermissionDeniedError("You may only delete your own files")

        await self._repo.mark_deleted(resource)
        await asyncio.to_thread(Path(resource.path).unlink, missing_ok=True)

        logger.info(f"Deleted resource {resource_id} ({resource.path})")
        return DeleteResult(resource_id=resource_id, deleted=True, message="File deleted")

    async def batch_delete(
        self,
        resource_ids: Sequence[str],
        actor_id: str,
        actor_is_admin: bool = False,
    ) -> BatchDeleteResponse:
        """Delete several resources, reporting each outcome."""
        results: List[DeleteResult] = []
        for resource_id in dict.fromkeys(resource_ids):
            try:
                results.append(await self.delete_file(resource_id, actor_id, actor_is_admin))
            except (ResourceNotFoundError, PermissionDeniedError) as e:
                results.append(DeleteResult(resource_id=resource_id, deleted=False, message=e.message))

        deleted = sum(1 for r in results if r.deleted)
        return BatchDeleteResponse(
            total=len(results),
            deleted=deleted,
            failed=len(results) - deleted,
            results=results,
        )
