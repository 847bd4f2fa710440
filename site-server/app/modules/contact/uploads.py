"""Attachment storage for contact submissions."""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from fastapi import UploadFile

from .exceptions import UploadRejectedError
from .models import StoredAttachment

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


@dataclass(slots=True)
class AttachmentStore:
    storage_dir: Path
    max_file_size: int
    allowed_extensions: frozenset[str] = field(default_factory=frozenset)

    @staticmethod
    def extension_of(filename: str) -> str:
        return Path(filename).suffix.lower().lstrip(".")

    @staticmethod
    def generate_name(extension: str) -> str:
        return f"{uuid.uuid4().hex}_{int(time.time())}.{extension}"

    def ensure_storage(self) -> None:
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    async def store(self, upload: UploadFile) -> StoredAttachment:
        """Persist one upload under a generated name or raise ``UploadRejectedError``."""
        original_name = Path(upload.filename or "").name
        if not original_name:
            raise UploadRejectedError("<unnamed>", "missing file name")

        extension = self.extension_of(original_name)
        if extension not in self.allowed_extensions:
            raise UploadRejectedError(original_name, f"extension '{extension}' not allowed")

        if upload.size is not None and upload.size > self.max_file_size:
            raise UploadRejectedError(original_name, "file too large")

        self.ensure_storage()
        stored_name = self.generate_name(extension)
        target_path = self.storage_dir / stored_name
        temp_path = target_path.with_suffix(target_path.suffix + ".upload")

        total_size = 0
        try:
            with temp_path.open("wb") as buffer:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    total_size += len(chunk)
                    if total_size > self.max_file_size:
                        raise UploadRejectedError(original_name, "file too large")
                    buffer.write(chunk)
        except (UploadRejectedError, OSError):
            temp_path.unlink(missing_ok=True)
            raise
        finally:
            await upload.close()

        if total_size == 0:
            temp_path.unlink(missing_ok=True)
            raise UploadRejectedError(original_name, "file is empty")

        temp_path.replace(target_path)
        return StoredAttachment(
            original_name=original_name,
            stored_name=stored_name,
            path=str(target_path),
            size=total_size,
        )

    async def store_all(self, uploads: Iterable[UploadFile]) -> list[StoredAttachment]:
        """Store every acceptable upload; rejected files are logged and skipped."""
        stored: list[StoredAttachment] = []
        for upload in uploads:
            try:
                stored.append(await self.store(upload))
            except UploadRejectedError as exc:
                logger.info("Skipping attachment %s: %s", exc.filename, exc.reason)
        return stored
