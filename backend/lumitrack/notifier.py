"""Delivery of password-reset links."""
from __future__ import annotations

from typing import Protocol

import httpx
import structlog

from .config import Settings, get_settings

log = structlog.get_logger(__name__)

RESET_SUBJECT = "Reset your LumiTrack password"


class PasswordResetNotifier(Protocol):
    async def send(self, email: str, token: str) -> bool:
        """Deliver ``token`` to ``email``; True when the provider accepted it."""


class MailgunPasswordResetNotifier:
    """Sends the reset link through the Mailgun messages API.

    Unconfigured deployments skip delivery and only log the attempt. Provider
    failures are logged and reported as ``False``; the caller must not let
    them change the response given to the requester.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.timeout = timeout
        self.transport = transport

    def reset_link(self, token: str) -> str:
        return f"{self.settings.frontend_url.rstrip('/')}/reset-password?token={token}"

    def _message(self, email: str, token: str) -> dict[str, str]:
        link = self.reset_link(token)
        minutes = self.settings.password_reset_expires_minutes
        return {
            "from": self.settings.mail_from,
            "to": email,
            "subject": RESET_SUBJECT,
            "text": (
                f"Use the link below to choose a new password.\n\n{link}\n\n"
                f"The link expires in {minutes} minutes and works once."
            ),
            "html": (
                f"<p>Use the link below to choose a new password.</p>"
                f'<p><a href="{link}">{link}</a></p>'
                f"<p>The link expires in {minutes} minutes and works once.</p>"
            ),
        }

    async def send(self, email: str, token: str) -> bool:
        if not self.settings.mailgun_configured:
            log.warning("password_reset_email_skipped", reason="mailgun_not_configured")
            return False

        base = self.settings.mailgun_base_url.strip().rstrip("/")
        domain = self.settings.mailgun_domain.strip().lower()
        url = f"{base}/v3/{domain}/messages"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    url,
                    auth=("api", self.settings.mailgun_api_key),
                    data=self._message(email, token),
                )
        except httpx.HTTPError as exc:
            log.error("password_reset_email_failed", error=type(exc).__name__)
            return False

        if not response.is_success:
            log.error(
                "password_reset_email_failed",
                status_code=response.status_code,
                body=response.text[:500],
            )
            return False
        log.info("password_reset_email_sent", status_code=response.status_code)
        return True
