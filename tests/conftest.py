from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.core.config import ContactSettings, MailSettings, RateLimitSettings, Settings
from app.main import create_app
from app.modules.contact.mailer import ConsoleMailTransport


ADA = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "company": "Analytical Engines",
    "country": "UK",
    "purpose": "ai-ml-consulting",
    "message": "Interested in your AI consulting services for our new project.",
    "consent": "true",
    "website": "",
}


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        environment="test",
        mail=MailSettings(backend="console"),
        contact=ContactSettings(
            upload_dir=tmp_path / "uploads",
            audit_log_path=tmp_path / "logs" / "contact_submissions.log",
            notification_timeout=5,
        ),
        rate_limit=RateLimitSettings(backend="memory", window_seconds=3600, max_submissions=5),
        site_dir=tmp_path / "dist",
    )


@pytest.fixture
def outbox() -> ConsoleMailTransport:
    return ConsoleMailTransport()


@pytest.fixture
def client(settings: Settings, outbox: ConsoleMailTransport):
    app = create_app(settings, mail_transport=outbox)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def ada() -> dict[str, str]:
    return dict(ADA)
