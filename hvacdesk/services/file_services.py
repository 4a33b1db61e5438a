"""Photo storage backends and the file service used by the report registry.

The service validates uploads, stores them under report-scoped keys and
removes them again. The backend is chosen by ``STORAGE_BACKEND``:

- ``local``: files under ``UPLOAD_DIR``, served by the app at ``/uploads``
- ``minio``: objects in ``MINIO_BUCKET``, each call timed as an outbound call

Security Features:
- Image content type and size validation
- Payloads must decode as images
- Sanitized object names and prevention of path traversal
"""

import io
import mimetypes
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, List, Dict, Iterable

from minio import Minio
from PIL import Image

from hvacdesk.core.config import settings
from hvacdesk.core.observability import log_outbound_call
from hvacdesk.schemas.report import PhotoUpload
from hvacdesk.services.base import BaseService
from hvacdesk.services.exceptions import (
    FileSizeLimitError,
    InvalidFileTypeError,
    StorageError,
    ValidationError,
)


def sanitize_filename(name: str) -> str:
    keep = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-")
    cleaned = "".join(c if c in keep else "_" for c in Path(name).name)
    return cleaned.lstrip(".")[:120] or "photo"


def normalize_minio_endpoint(endpoint: str, default_secure: bool) -> tuple[str, bool]:
    ep = (endpoint or "").strip()
    secure = default_secure
    if ep.startswith("http://"):
        secure = False
        ep = ep[len("http://"):]
    elif ep.startswith("https://"):
        secure = True
        ep = ep[len("https://"):]
    if "/" in ep:
        ep = ep.split("/", 1)[0]
    return ep, secure


class FileStorage(ABC):
    """Where photo binaries live. Keys are storage-relative paths."""

    @abstractmethod
    def save(self, key: str, data: bytes, content_type: Optional[str] = None,
             correlation_id: Optional[str] = None) -> None:
        """Store data under key, raising StorageError on failure."""

    @abstractmethod
    def delete(self, key: str, correlation_id: Optional[str] = None) -> None:
        """Remove the object under key. Missing objects are not an error."""


class LocalFileStorage(FileStorage):
    """Stores files below a root directory on the local disk."""

    def __init__(self, root: str):
        self.root = Path(root).resolve()

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise StorageError("resolve", f"key escapes storage root: {key}")
        return path

    def save(self, key, data, content_type=None, correlation_id=None):
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageError("save", str(e), correlation_id=correlation_id) from e

    def delete(self, key, correlation_id=None):
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError("delete", str(e), correlation_id=correlation_id) from e


class MinioFileStorage(FileStorage):
    """Stores files as objects in a MinIO (S3 compatible) bucket."""

    def __init__(self, client: Minio, bucket: str):
        self.client = client
        self.bucket = bucket
        self._bucket_checked = False

    @classmethod
    def from_settings(cls) -> "MinioFileStorage":
        endpoint, secure = normalize_minio_endpoint(settings.MINIO_ENDPOINT, settings.MINIO_SECURE)
        client = Minio(
            endpoint,
            access_key=settings.MINIO_ACCESS_KEY,
            secret_key=settings.MINIO_SECRET_KEY,
            secure=secure,
        )
        return cls(client, settings.MINIO_BUCKET)

    def _ensure_bucket(self) -> None:
        if self._bucket_checked:
            return
        if not self.client.bucket_exists(self.bucket):
            self.client.make_bucket(self.bucket)
        self._bucket_checked = True

    def save(self, key, data, content_type=None, correlation_id=None):
        def _put():
            self._ensure_bucket()
            return self.client.put_object(
                self.bucket,
                key,
                io.BytesIO(data),
                length=len(data),
                content_type=content_type or "application/octet-stream",
            )

        try:
            log_outbound_call("minio", f"{self.bucket}/{key}", "put_object", correlation_id, _put)
        except Exception as e:
            raise StorageError("save", str(e), correlation_id=correlation_id) from e

    def delete(self, key, correlation_id=None):
        try:
            log_outbound_call(
                "minio",
                f"{self.bucket}/{key}",
                "remove_object",
                correlation_id,
                lambda: self.client.remove_object(self.bucket, key),
            )
        except Exception as e:
            raise StorageError("delete", str(e), correlation_id=correlation_id) from e


def build_file_storage(backend: Optional[str] = None) -> FileStorage:
    """Create the storage backend named by STORAGE_BACKEND."""
    backend = (backend or settings.STORAGE_BACKEND).strip().lower()
    if backend == "local":
        return LocalFileStorage(settings.UPLOAD_DIR)
    if backend == "minio":
        return MinioFileStorage.from_settings()
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")


class FileService(BaseService):
    """Validates, stores and removes report photos.

    Used by ReportService; it never touches the database.
    """

    def __init__(
        self,
        storage: FileStorage,
        correlation_id: Optional[str] = None,
        max_photos: Optional[int] = None,
        max_size_mb: Optional[int] = None,
        public_base_url: Optional[str] = None,
    ):
        """Initialize file service.

        Args:
            storage: Backend that holds the binaries
            correlation_id: Optional request correlation ID for logging
            max_photos: Files accepted per request (defaults to REPORT_MAX_PHOTOS)
            max_size_mb: Size limit per file (defaults to MAX_UPLOAD_SIZE_MB)
            public_base_url: Prefix for display URLs (defaults to PUBLIC_UPLOADS_URL)
        """
        super().__init__(correlation_id)
        self.storage = storage
        self.max_photos = max_photos or settings.REPORT_MAX_PHOTOS
        self.max_size_bytes = (max_size_mb or settings.MAX_UPLOAD_SIZE_MB) * 1024 * 1024
        self.public_base_url = (public_base_url or settings.PUBLIC_UPLOADS_URL).rstrip("/")

    def _content_type(self, photo: PhotoUpload) -> str:
        content_type = (photo.content_type or "").split(";")[0].strip().lower()
        if not content_type or content_type == "application/octet-stream":
            guessed, _ = mimetypes.guess_type(photo.filename)
            content_type = guessed or "application/octet-stream"
        return content_type

    def validate_photos(self, photos: List[PhotoUpload]) -> None:
        """Check count, size, declared type and that each payload decodes as an image.

        Raises:
            ValidationError: Too many files
            FileSizeLimitError: A file exceeds the size limit
            InvalidFileTypeError: A file is not an image
        """
        if len(photos) > self.max_photos:
            raise ValidationError(
                field="photos",
                message=f"At most {self.max_photos} photos may be uploaded at once",
                correlation_id=self.correlation_id
            )

        for photo in photos:
            size = len(photo.data)
            if size > self.max_size_bytes:
                raise FileSizeLimitError(photo.filename, size, self.max_size_bytes, correlation_id=self.correlation_id)

            content_type = self._content_type(photo)
            if not content_type.startswith("image/") or size == 0:
                raise InvalidFileTypeError(photo.filename, content_type, correlation_id=self.correlation_id)

            try:
                with Image.open(io.BytesIO(photo.data)) as img:
                    img.verify()
            except Exception as e:
                self.log_operation("photo_decode_failed", photo_name=photo.filename, error=str(e))
                raise InvalidFileTypeError(photo.filename, content_type, correlation_id=self.correlation_id)

        self.log_operation("photos_validated", count=len(photos))

    def build_key(self, report_id: int, filename: str) -> str:
        return f"reports/{report_id}/{uuid.uuid4().hex}_{sanitize_filename(filename)}"

    def store_report_photos(self, report_id: int, photos: List[PhotoUpload]) -> List[Dict[str, str]]:
        """Save each photo under the report's prefix.

        If any save fails, the files already written are removed before the
        error propagates.

        Returns:
            One dict per photo with file_path and original_name
        """
        stored: List[Dict[str, str]] = []
        try:
            for photo in photos:
                key = self.build_key(report_id, photo.filename)
                self.storage.save(key, photo.data, self._content_type(photo), correlation_id=self.correlation_id)
                stored.append({"file_path": key, "original_name": photo.filename[:255]})
        except StorageError:
            self.delete_quietly(s["file_path"] for s in stored)
            raise

        self.log_operation("photos_stored", report_id=report_id, count=len(stored))
        return stored

    def delete_quietly(self, keys: Iterable[str]) -> int:
        """Best-effort removal; failures are logged and skipped.

        Returns:
            Number of keys removed without error
        """
        removed = 0
        for key in keys:
            try:
                self.storage.delete(key, correlation_id=self.correlation_id)
                removed += 1
            except StorageError as e:
                self.logger.warning(
                    "Failed to delete stored file",
                    extra={
                        "correlation_id": self.correlation_id,
                        "service": self.__class__.__name__,
                        "key": key,
                        "error": e.message
                    }
                )
        return removed

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"
