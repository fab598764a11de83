"""Network-backed collaborators: SMTP email, Slack webhook, HTTP client."""

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Optional

import httpx
import structlog

from core.exceptions import ActionError
from integrations.base import ChatPoster, EmailSender, HttpClient, HttpResponse

logger = structlog.get_logger(__name__)


class SmtpEmailSender(EmailSender):
    """Send emails through an SMTP relay.

    The blocking smtplib session runs in the default executor.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        user: str = "",
        password: str = "",
        from_address: str = "workflows@localhost",
        use_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_address = from_address
        self.use_tls = use_tls

    async def send(self, to: Any, subject: str, body: str) -> dict:
        recipients = to if isinstance(to, list) else [to]
        if not recipients or not all(recipients):
            raise ActionError("Email action requires a recipient")

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = ", ".join(recipients)
        msg.attach(MIMEText(body or "", "plain"))

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, lambda: self._send_smtp(recipients, msg))
        except (smtplib.SMTPException, OSError) as e:
            raise ActionError(f"Email delivery failed: {e}")

        logger.info("Email sent", to=recipients, subject=subject)
        return {"sent": True, "to": to}

    def _send_smtp(self, recipients: list, msg: MIMEMultipart) -> None:
        """Synchronous SMTP send."""
        with smtplib.SMTP(self.host, self.port) as server:
            if self.use_tls:
                server.starttls()
            if self.user and self.password:
                server.login(self.user, self.password)
            server.sendmail(self.from_address, recipients, msg.as_string())


class HttpxClient(HttpClient):
    """Outbound HTTP through httpx; JSON body, configurable timeout."""

    def __init__(self, timeout: float = 15.0):
        self.timeout = timeout

    async def request(
        self,
        url: str,
        method: str,
        headers: Optional[dict] = None,
        body: Any = None,
    ) -> HttpResponse:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.request(method, url, headers=headers or {}, json=body)
        return HttpResponse(status=response.status_code, ok=response.is_success)


class SlackWebhookPoster(ChatPoster):
    """Post messages through a Slack incoming webhook."""

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def post(self, channel: str, message: str) -> dict:
        payload = {"text": message}
        if channel:
            payload["channel"] = channel

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.webhook_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise ActionError(f"Slack message failed: {e}")

        logger.info("Slack message sent", channel=channel)
        return {"sent": True, "channel": channel}
