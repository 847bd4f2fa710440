from __future__ import annotations

import asyncio
from datetime import timedelta
from pathlib import Path

import pytest

from app.modules.contact import (
    AttachmentStore,
    AuditLog,
    ContactService,
    InboundSubmission,
    Notifier,
    RateLimitedError,
    ValidationFailedError,
)
from app.modules.ratelimit import InMemoryRateLimitStore, RateLimiter


class SlowChannel:
    name = "operator_email"

    def __init__(self) -> None:
        self.delivered = 0

    async def deliver(self, submission, attachments):
        await asyncio.sleep(0.05)
        self.delivered += 1


@pytest.fixture
def channel() -> SlowChannel:
    return SlowChannel()


@pytest.fixture
def service(tmp_path: Path, channel: SlowChannel) -> ContactService:
    return ContactService(
        rate_limiter=RateLimiter(store=InMemoryRateLimitStore(), window=timedelta(hours=1), max_hits=5),
        attachments=AttachmentStore(storage_dir=tmp_path / "uploads", max_file_size=1024),
        notifier=Notifier([channel], timeout=5),
        audit_log=AuditLog(tmp_path / "audit.log"),
    )


def test_concurrent_burst_from_one_address_stops_at_cap(service: ContactService, channel: SlowChannel, ada):
    async def burst():
        requests = [
            service.submit(InboundSubmission(method="POST", client_ip="198.51.100.9", fields=ada))
            for _ in range(20)
        ]
        return await asyncio.gather(*requests, return_exceptions=True)

    outcomes = asyncio.run(burst())

    accepted = [item for item in outcomes if not isinstance(item, BaseException)]
    refused = [item for item in outcomes if isinstance(item, RateLimitedError)]
    assert len(accepted) == 5
    assert len(refused) == 15
    assert channel.delivered == 5
    assert len(service.audit_log.read_records()) == 5


def test_invalid_submission_does_not_use_a_slot(service: ContactService, ada):
    async def scenario():
        for _ in range(5):
            with pytest.raises(ValidationFailedError):
                await service.submit(InboundSubmission(method="POST", client_ip="198.51.100.9", fields={}))
        return await service.submit(InboundSubmission(method="POST", client_ip="198.51.100.9", fields=ada))

    assert asyncio.run(scenario()).email_sent is True
