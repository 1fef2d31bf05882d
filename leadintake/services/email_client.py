import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict

from leadintake.core.config import Settings

logger = logging.getLogger(__name__)


class EmailSettings(BaseModel):
    """Everything outbound email needs, resolved once from ``Settings``.

    Injected into :class:`ResendEmailClient` and the message service so
    neither reads the environment on its own.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    api_url: str = "https://api.resend.com/emails"
    from_email: str = "onboarding@resend.dev"
    sender_name: str = "Netic"
    booking_url: str = "http://localhost:3000/book"
    timeout_seconds: float = 10.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailSettings":
        return cls(
            api_key=settings.RESEND_API_KEY,
            api_url=settings.RESEND_API_URL,
            from_email=settings.FROM_EMAIL,
            sender_name=settings.SENDER_NAME,
            booking_url=settings.BOOKING_URL,
            timeout_seconds=settings.EMAIL_TIMEOUT_SECONDS,
        )


class EmailSendResult(BaseModel):
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


NOT_CONFIGURED_ERROR = "Email service not configured. Set RESEND_API_KEY in environment."


class ResendEmailClient:
    """Sends transactional email through the Resend HTTP API.

    Never raises for delivery problems: every failure comes back as an
    :class:`EmailSendResult` with ``success=False`` and a reason.
    """

    def __init__(self, email_settings: EmailSettings) -> None:
        self._settings = email_settings

    @property
    def is_configured(self) -> bool:
        return bool(self._settings.api_key)

    async def send(
        self,
        *,
        to: str,
        subject: str,
        text: str,
        html: Optional[str] = None,
        from_address: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> EmailSendResult:
        if not self.is_configured:
            logger.warning("RESEND_API_KEY not configured; email to %s not sent", to)
            return EmailSendResult(success=False, error=NOT_CONFIGURED_ERROR)
        if not to:
            return EmailSendResult(success=False, error="No recipient address")

        payload: Dict[str, Any] = {
            "from": from_address or self._settings.from_email,
            "to": [to],
            "subject": subject,
            "text": text,
        }
        if html:
            payload["html"] = html
        if reply_to:
            payload["reply_to"] = reply_to

        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
            ) as client:
                response = await client.post(
                    self._settings.api_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._settings.api_key}"},
                )
        except httpx.TimeoutException:
            logger.error("Email provider timed out sending to %s", to)
            return EmailSendResult(success=False, error="Email provider timed out")
        except httpx.HTTPError as exc:
            logger.error("Email provider unreachable: %s", exc)
            return EmailSendResult(success=False, error=f"Email provider unreachable: {exc}")

        if response.is_error:
            error = self._error_message(response)
            logger.error(
                "Email provider returned %s: %s", response.status_code, error
            )
            return EmailSendResult(success=False, error=error)

        message_id = self._json(response).get("id")
        logger.info("Email sent to %s (provider id %s)", to, message_id)
        return EmailSendResult(success=True, message_id=message_id)

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    def _error_message(self, response: httpx.Response) -> str:
        body = self._json(response)
        return body.get("message") or f"Email provider returned {response.status_code}"
