"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from types import MappingProxyType
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.config import Settings
from app.infrastructure.database import build_engine, build_session_factory, init_db
from app.infrastructure.database.repositories import SqlRateLimitStore
from app.modules.contact import AttachmentStore, AuditLog, ContactService, Notifier
from app.modules.contact.mailer import EmailRenderer, MailTransport, build_transport
from app.modules.contact.notifications import (
    AutoReplyChannel,
    ChatWebhookChannel,
    CrmContactChannel,
    NotificationChannel,
    OperatorEmailChannel,
    QuickNotificationChannel,
)
from app.modules.ratelimit import InMemoryRateLimitStore, RateLimiter, RateLimitStore

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def resolve_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (PROJECT_ROOT / path).resolve()


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    mail_transport: Optional[MailTransport] = None
    engine: Optional[AsyncEngine] = field(default=None, init=False)
    contact_service: Optional[ContactService] = field(default=None, init=False)

    def _build_rate_limit_store(self) -> RateLimitStore:
        if self.settings.rate_limit.backend == "database":
            self.engine = build_engine(self.settings)
            return SqlRateLimitStore(build_session_factory(self.engine))
        return InMemoryRateLimitStore()

    def _build_channels(self, transport: MailTransport, renderer: EmailRenderer) -> list[NotificationChannel]:
        settings = self.settings
        cc_emails = MappingProxyType(dict(settings.contact.cc_emails))
        channels: list[NotificationChannel] = [
            OperatorEmailChannel(transport, renderer, settings.mail, cc_emails),
            AutoReplyChannel(transport, renderer, settings.mail, settings.contact.site_url),
        ]
        if settings.webhook_enabled:
            channels.append(
                ChatWebhookChannel(settings.integrations.slack_webhook_url, settings.integrations.timeout)
            )
        if settings.crm_enabled:
            channels.append(
                CrmContactChannel(
                    settings.integrations.hubspot_api_key,
                    settings.integrations.hubspot_base_url,
                    settings.integrations.timeout,
                )
            )
        return channels

    def init_services(self) -> ContactService:
        """Build the contact service graph once for the lifetime of the app."""
        settings = self.settings
        transport = self.mail_transport or build_transport(settings.mail)
        self.mail_transport = transport
        renderer = EmailRenderer()

        limiter = RateLimiter(
            store=self._build_rate_limit_store(),
            window=timedelta(seconds=settings.rate_limit.window_seconds),
            max_hits=settings.rate_limit.max_submissions,
        )
        attachments = AttachmentStore(
            storage_dir=resolve_path(settings.contact.upload_dir),
            max_file_size=settings.contact.max_file_size,
            allowed_extensions=frozenset(ext.lower().lstrip(".") for ext in settings.contact.allowed_extensions),
        )
        self.contact_service = ContactService(
            rate_limiter=limiter,
            attachments=attachments,
            notifier=Notifier(
                self._build_channels(transport, renderer),
                timeout=settings.contact.notification_timeout,
            ),
            audit_log=AuditLog(resolve_path(settings.contact.audit_log_path)),
            quick_channel=QuickNotificationChannel(transport, renderer, settings.mail, settings.project_name),
            quick_min_message_length=settings.contact.quick_min_message_length,
        )
        return self.contact_service

    async def startup(self) -> None:
        if self.engine is not None:
            await init_db(self.engine)

    async def shutdown(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()


def build_container(settings: Settings, mail_transport: Optional[MailTransport] = None) -> ApplicationContainer:
    container = ApplicationContainer(settings=settings, mail_transport=mail_transport)
    container.init_services()
    return container


__all__ = ["ApplicationContainer", "build_container", "resolve_path"]
