from __future__ import annotations

import asyncio
import json
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path

from app.modules.contact import AuditLog, InboundSubmission
from app.modules.contact.validation import build_submission


def test_record_submission_writes_one_json_line(tmp_path: Path, ada):
    log = AuditLog(tmp_path / "logs" / "contact_submissions.log")
    submission = build_submission(InboundSubmission(method="POST", client_ip="203.0.113.7", fields=ada))

    asyncio.run(log.record_submission(submission, success=True, at=datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)))

    lines = log.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0]) == {
        "timestamp": "2026-10-18 09:30:00",
        "ip": "203.0.113.7",
        "email": "ada@example.com",
        "company": "Analytical Engines",
        "purpose": "ai-ml-consulting",
        "success": True,
    }


def test_concurrent_appends_never_interleave(tmp_path: Path):
    log = AuditLog(tmp_path / "audit.log")
    padding = "x" * 8192

    def write(worker: int) -> None:
        for index in range(25):
            log.append({"worker": worker, "index": index, "padding": padding})

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(write, range(8)))

    records = log.read_records()
    assert len(records) == 200
    assert {(item["worker"], item["index"]) for item in records} == {(w, i) for w in range(8) for i in range(25)}


def test_missing_log_reads_as_empty(tmp_path: Path):
    assert AuditLog(tmp_path / "nothing.log").read_records() == []
