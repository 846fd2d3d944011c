from __future__ import annotations

import logging
import smtplib
from collections.abc import Callable
from email.message import EmailMessage
from typing import Any

import requests

from ..models.candidate import NOT_AVAILABLE
from ..models.config_models import EmailConfig, ReportConfig, WhatsAppConfig
from ..models.delivery import DeliveryRecord, NotificationRequest
from .messages import email_html, template_parameters

"""Notification channels.

One channel abstraction, parameterized by provider configuration:
- EmailChannel: SMTP (STARTTLS + login) with a per-call timeout
- WhatsAppChannel: template-messaging relay over HTTPS with a bearer token

send() never raises for delivery problems; failures come back as a
DeliveryRecord with success=False so one candidate cannot abort a batch.
"""

__all__ = [
    "DeliveryError",
    "EmailChannel",
    "NotificationChannel",
    "RelayError",
    "WhatsAppChannel",
    "build_channels",
]

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    """Raised by a channel when one delivery cannot be completed."""


class RelayError(DeliveryError):
    """Non-2xx answer from the messaging relay."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class NotificationChannel:
    """Base class: subclasses implement recipient() and _deliver()."""

    name = "channel"

    def recipient(self, request: NotificationRequest) -> str | None:
        raise NotImplementedError

    def _deliver(self, request: NotificationRequest, recipient: str) -> tuple[str, int | None]:
        """Perform the call; return (status message, provider status)."""
        raise NotImplementedError

    def send(self, request: NotificationRequest) -> DeliveryRecord:
        candidate = request.candidate
        recipient = self.recipient(request)
        try:
            if not recipient:
                raise DeliveryError(f"no {self.name} recipient for {candidate.name}")
            message, provider_status = self._deliver(request, recipient)
        except DeliveryError as e:
            logger.warning(f"{self.name}: card={candidate.card_number} {e}")
            return DeliveryRecord(
                channel=self.name,
                candidate_id=candidate.id,
                recipient=recipient,
                success=False,
                message=str(e),
                provider_status=getattr(e, "status", None),
            )
        logger.info(f"{self.name}: card={candidate.card_number} sent to {recipient}")
        return DeliveryRecord(
            channel=self.name,
            candidate_id=candidate.id,
            recipient=recipient,
            success=True,
            message=message,
            provider_status=provider_status,
        )


class EmailChannel(NotificationChannel):
    name = "email"

    def __init__(
        self,
        config: EmailConfig,
        report: ReportConfig,
        smtp_factory: Callable[..., Any] | None = None,
    ) -> None:
        self.config = config
        self.report = report
        self._smtp_factory = smtp_factory or smtplib.SMTP

    def recipient(self, request: NotificationRequest) -> str | None:
        email = request.candidate.email
        if not email or email == NOT_AVAILABLE:
            return None
        return email

    def build_message(self, request: NotificationRequest, recipient: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = self.report.subject
        msg["From"] = self.config.sender or self.config.user or ""
        msg["To"] = recipient
        msg.set_content(
            f"Your {self.report.period_label} progress report. "
            "Please view this message in an HTML-capable mail client."
        )
        msg.add_alternative(email_html(request, self.report), subtype="html")
        return msg

    def _deliver(self, request: NotificationRequest, recipient: str) -> tuple[str, int | None]:
        msg = self.build_message(request, recipient)
        logger.debug(f"email: sending to {recipient} via {self.config.host}:{self.config.port}")
        try:
            with self._smtp_factory(
                self.config.host, self.config.port, timeout=self.config.timeout_seconds
            ) as smtp:
                if self.config.use_starttls:
                    smtp.starttls()
                if self.config.user and self.config.password:
                    smtp.login(self.config.user, self.config.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"failed to send mail to {recipient}: {e}") from e
        return (f"Mail sent to {recipient}", None)


class WhatsAppChannel(NotificationChannel):
    name = "whatsapp"

    def __init__(self, config: WhatsAppConfig, report: ReportConfig) -> None:
        self.config = config
        self.report = report

    def recipient(self, request: NotificationRequest) -> str | None:
        return request.candidate.phone or None

    def build_payload(self, request: NotificationRequest, recipient: str) -> dict[str, Any]:
        return {
            "to": str(recipient),
            "name": self.config.template_name,
            "components": [
                {
                    "type": "body",
                    "parameters": [
                        {"type": "text", "text": text}
                        for text in template_parameters(request, self.report)
                    ],
                }
            ],
        }

    def _deliver(self, request: NotificationRequest, recipient: str) -> tuple[str, int | None]:
        if not self.config.token:
            raise DeliveryError("whatsapp relay token is not configured")
        payload = self.build_payload(request, recipient)
        logger.debug(f"whatsapp: payload={payload}")
        try:
            response = requests.post(
                self.config.endpoint,
                json=payload,
                headers={"Authorization": f"Bearer {self.config.token}"},
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as e:
            raise DeliveryError(f"whatsapp relay request failed: {e}") from e

        try:
            body: Any = response.json()
        except ValueError:
            # JSON でない応答はテキストのまま扱う
            body = response.text
        logger.debug(f"whatsapp: status={response.status_code} body={body}")

        if not response.ok:
            raise RelayError(
                f"whatsapp relay rejected message ({response.status_code} {response.reason}): {body}",
                status=response.status_code,
            )
        return (f"WhatsApp template sent to {recipient} ({response.status_code})", response.status_code)


def build_channels(
    names: list[str],
    report: ReportConfig,
    email: EmailConfig | None,
    whatsapp: WhatsAppConfig | None,
) -> list[NotificationChannel]:
    """Instantiate the requested channels; raises DeliveryError when one is not configured."""
    channels: list[NotificationChannel] = []
    for name in names:
        if name == EmailChannel.name:
            if email is None:
                raise DeliveryError("email channel requested but no 'email' section in config")
            channels.append(EmailChannel(email, report))
        elif name == WhatsAppChannel.name:
            if whatsapp is None:
                raise DeliveryError("whatsapp channel requested but no 'whatsapp' section in config")
            channels.append(WhatsAppChannel(whatsapp, report))
        else:
            raise DeliveryError(f"unknown channel: {name}")
    return channels
