"""
cadastro/services/document_service.py

Purpose: Uploaded document storage

- Stores document images on the local filesystem
- Deletes replaced documents
- Sweeps files older than the configured age
- Document validation stub (always approves after a delay)
"""

import asyncio
import mimetypes
import uuid
from pathlib import Path
from typing import Optional

from cadastro.core.config import settings
from cadastro.core.exceptions import DocumentStorageError
from cadastro.core.logging import get_logger
from utils.time_utils import is_older_than

logger = get_logger(__name__)


def extension_for(content_type: Optional[str]) -> str:
    """Maps a MIME type to a file extension (".jpg", ".pdf", ...)."""
    if not content_type:
        return ".bin"
    if content_type == "image/jpeg":
        return ".jpg"
    return mimetypes.guess_extension(content_type) or ".bin"


class LocalDocumentStore:
    """
    Filesystem-backed document store. References are file names inside
    base_dir; callers never see absolute paths.
    """

    def __init__(self, base_dir: str):
        self.base_dir = Path(base_dir)

    def ensure_dir(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, reference: str) -> Path:
        path = (self.base_dir / reference).resolve()
        if path.parent != self.base_dir.resolve():
            raise DocumentStorageError("Invalid document reference", details={"reference": reference})
        return path

    async def store(self, content: bytes, extension: str = ".bin") -> str:
        """
        Writes `content` under a fresh name.

        Returns:
            The document reference

        Raises:
            DocumentStorageError: on I/O failure
        """
        reference = f"{uuid.uuid4().hex}{extension}"
        try:
            await asyncio.to_thread(self.ensure_dir)
            await asyncio.to_thread(self.path_for(reference).write_bytes, content)
        except OSError as e:
            logger.error(f"Failed to store document {reference}: {e}")
            raise DocumentStorageError(details={"reference": reference}) from e

        logger.info(f"📄 Document stored: {reference} ({len(content)} bytes)")
        return reference

    async def delete(self, reference: str) -> bool:
        """Deletes a document. Returns False if it was already gone."""
        try:
            await asyncio.to_thread(self.path_for(reference).unlink)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise DocumentStorageError(details={"reference": reference}) from e
        logger.debug(f"Document deleted: {reference}")
        return True

    def _sweep(self, max_age_seconds: float) -> int:
        if not self.base_dir.is_dir():
            return 0

        deleted = 0
        for path in self.base_dir.iterdir():
            try:
                if not path.is_file():
                    continue
                if is_older_than(path.stat().st_mtime, max_age_seconds):
                    path.unlink()
                    deleted += 1
            except FileNotFoundError:
                # Removed concurrently (replaced upload or another sweep)
                continue
            except OSError as e:
                logger.error(f"Error cleaning up {path}: {e}")
        return deleted

    async def sweep(self, max_age_seconds: float) -> int:
        """
        Deletes stored documents older than max_age_seconds.

        Returns:
            Number of files deleted
        """
        deleted = await asyncio.to_thread(self._sweep, max_age_seconds)
        if deleted:
            logger.info(f"🧹 Swept {deleted} stale documents from {self.base_dir}")
        return deleted


class DocumentValidator:
    """
    Placeholder for document authenticity checks.
    Always approves after `delay_seconds`.
    """

    def __init__(self, delay_seconds: float = 1.0):
        self.delay_seconds = delay_seconds

    async def validate(self, reference: str) -> bool:
        await asyncio.sleep(self.delay_seconds)
        logger.debug(f"Document {reference} validated (stub)")
        return True


def build_document_store() -> LocalDocumentStore:
    return LocalDocumentStore(settings.UPLOAD_DIR)


def build_document_validator() -> DocumentValidator:
    return DocumentValidator(settings.DOCUMENT_VALIDATION_DELAY_SECONDS)
