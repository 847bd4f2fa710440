"""Append-only JSON-lines log of accepted contact submissions."""

from __future__ import annotations

import asyncio
import fcntl
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .models import Submission


class AuditLog:
    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def append(self, record: dict[str, Any]) -> None:
        """Write one record as a single line under an exclusive file lock."""
        line = (json.dumps(record, ensure_ascii=False) + "\n").encode("utf-8")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self._path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
            try:
                os.write(fd, line)
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)

    async def record_submission(
        self,
        submission: Submission,
        *,
        success: bool,
        at: Optional[datetime] = None,
    ) -> dict[str, Any]:
        record = {
            "timestamp": (at or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M:%S"),
            "ip": submission.client_ip,
            "email": submission.email,
            "company": submission.company,
            "purpose": submission.purpose,
            "success": success,
        }
        await asyncio.to_thread(self.append, record)
        return record

    def read_records(self) -> list[dict[str, Any]]:
        if not self._path.exists():
            return []
        with self._path.open("r", encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]
