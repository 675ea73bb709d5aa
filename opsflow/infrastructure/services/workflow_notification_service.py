"""Workflow notification: log-only sender and Resend HTTP sender (implement IEmailSender)."""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from opsflow.application.dtos.notification import EmailResult
from opsflow.application.interfaces.services import IEmailSender
from opsflow.core.config import Settings
from opsflow.domain.exceptions import ValidationException
from opsflow.shared.telemetry.logging import get_logger
from opsflow.shared.telemetry.tracing import traced
from opsflow.shared.utils.datetime import utc_now
from opsflow.shared.utils.generators import generate_cuid

logger = get_logger(__name__)

_TAG_PATTERN = re.compile(r"<[^>]+>")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def html_to_text(html_body: str, fallback: str = "") -> str:
    """Plain-text alternative: tags stripped, whitespace collapsed."""
    if not html_body:
        return fallback
    text = _TAG_PATTERN.sub(" ", html_body)
    return _WHITESPACE_PATTERN.sub(" ", text).strip() or fallback


class LogOnlyEmailSender:
    """IEmailSender that logs instead of sending email.

    Use when no provider is configured. Always reports success so workflow
    runs complete; the message id is prefixed with 'log-'.
    """

    async def send_email(self, to: str, subject: str, html_body: str) -> EmailResult:
        """Log the notification; no actual email sent."""
        message_id = f"log-{generate_cuid()}"
        logger.info(
            "Workflow email: would send to 1 recipient (subject=%r, message_id=%s)",
            (subject or "")[:80],
            message_id,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Workflow email recipient: %s (at %s)", to, utc_now().isoformat())
        logger.debug("Workflow email body (first 500 chars): %s", (html_body or "")[:500])
        return EmailResult(success=True, message_id=message_id)


class ResendEmailSender:
    """IEmailSender backed by the Resend HTTP API.

    Transport and API errors are mapped to EmailResult(success=False); this
    sender never raises for delivery problems.
    """

    def __init__(
        self,
        *,
        api_key: str,
        from_address: str,
        api_url: str = "https://api.resend.com/emails",
        timeout_seconds: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._from_address = from_address
        self._api_url = api_url
        self._timeout = timeout_seconds
        self._shared_http = http_client

    @asynccontextmanager
    async def _http_cm(self) -> AsyncIterator[httpx.AsyncClient]:
        """Yield shared HTTP client or a short-lived one."""
        if self._shared_http is not None:
            yield self._shared_http
            return
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            yield client

    @traced("email.resend.send")
    async def send_email(self, to: str, subject: str, html_body: str) -> EmailResult:
        payload = {
            "from": self._from_address,
            "to": [to],
            "subject": subject,
            "html": html_body,
            "text": html_to_text(html_body, fallback=subject),
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            async with self._http_cm() as client:
                response = await client.post(
                    self._api_url, json=payload, headers=headers, timeout=self._timeout
                )
        except httpx.TimeoutException:
            logger.warning("Resend request timed out after %ss", self._timeout)
            return EmailResult(success=False, error="Email provider timed out")
        except httpx.HTTPError as e:
            logger.warning("Resend request failed: %s", e)
            return EmailResult(success=False, error=str(e) or "Email transport error")

        if response.is_error:
            error = _error_message(response)
            logger.warning(
                "Resend API error (status=%s): %s", response.status_code, error
            )
            return EmailResult(success=False, error=error)
        try:
            body = response.json()
        except ValueError:
            body = None
        message_id = body.get("id") if isinstance(body, dict) else None
        return EmailResult(success=True, message_id=message_id)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Email provider returned HTTP {response.status_code}"


def create_email_sender(settings: Settings) -> IEmailSender:
    """Return the sender selected by settings.email_provider."""
    if settings.email_provider == "resend":
        api_key = settings.resend_api_key
        if api_key is None or not api_key.get_secret_value():
            raise ValidationException(
                "RESEND_API_KEY is required when email_provider is 'resend'",
                field="resend_api_key",
            )
        return ResendEmailSender(
            api_key=api_key.get_secret_value(),
            from_address=settings.email_from,
            api_url=settings.resend_api_url,
            timeout_seconds=settings.email_timeout_seconds,
        )
    return LogOnlyEmailSender()
