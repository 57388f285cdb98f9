"""Transactional email via the Resend HTTP API."""

from __future__ import annotations

from html import escape
from typing import Any

import httpx

from storefront.config import MailConfig, get_config
from storefront.logging_config import get_logger

logger = get_logger(__name__)


class EmailService:
    """Sends HTML emails through Resend.

    When no API key is configured, emails are logged and skipped so local
    development works without credentials.
    """

    def __init__(self, config: MailConfig, timeout: float = 10.0):
        self.config = config
        self.timeout = timeout

    async def send(self, to_email: str, subject: str, html_body: str) -> dict[str, Any]:
        """Send one email.

        Raises:
            httpx.HTTPError: If the provider rejects the request
        """
        if not self.config.api_key:
            logger.warning(
                "Email API key not configured, skipping email",
                extra={"subject": subject},
            )
            return {"id": "mock-email-id", "status": "skipped"}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.config.api_url,
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "from": self.config.from_address,
                    "to": to_email,
                    "subject": subject,
                    "html": html_body,
                },
            )
            response.raise_for_status()
            return response.json()

    async def send_password_reset(
        self,
        to_email: str,
        reset_url: str,
        store_name: str,
        ttl_minutes: int,
    ) -> dict[str, Any]:
        return await self.send(
            to_email,
            f"Reset your {store_name} password",
            build_password_reset_html(reset_url, store_name, ttl_minutes),
        )


def build_password_reset_html(reset_url: str, store_name: str, ttl_minutes: int) -> str:
    url = escape(reset_url, quote=True)
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 480px; margin: 0 auto;">
      <h2>{escape(store_name)}</h2>
      <p>We received a request to reset your password.</p>
      <p>
        <a href="{url}"
           style="display: inline-block; padding: 10px 18px; background: #111827;
                  color: #ffffff; text-decoration: none; border-radius: 6px;">
          Reset password
        </a>
      </p>
      <p>This link expires in {ttl_minutes} minutes. If you didn't ask for a reset,
      you can ignore this email.</p>
    </div>
    """


def get_email_service() -> EmailService:
    return EmailService(get_config().mail)
