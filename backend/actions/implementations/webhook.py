"""Outbound webhook action.

POSTs (or the configured method) the trigger payload as JSON to a URL.
Any transport error or non-2xx status fails the step.
"""

import ipaddress
from typing import Any, Dict
from urllib.parse import urlparse

import httpx
import structlog

from actions.base_action import BaseAction
from core.constants import ActionType
from core.exceptions import ActionError

logger = structlog.get_logger(__name__)


def _validate_url_safety(url: str) -> None:
    """Reject non-HTTP(S) schemes and literal loopback/private addresses.

    Raises:
        ActionError: If URL is unsafe
    """
    parsed = urlparse(url)
    if parsed.scheme.lower() not in ("http", "https"):
        raise ActionError(f"Unsupported scheme: {parsed.scheme or '(none)'}. Only HTTP and HTTPS allowed.")

    hostname = parsed.hostname
    if not hostname:
        raise ActionError("Webhook URL must have a valid hostname")
    if hostname.lower() == "localhost":
        raise ActionError("Webhook calls to localhost are not allowed")

    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        # Domain name; not resolved here
        return
    if ip.is_private or ip.is_loopback or ip.is_reserved or ip.is_link_local:
        raise ActionError(f"Webhook calls to private address {hostname} are not allowed")


class WebhookAction(BaseAction):
    """Call an external HTTP endpoint.

    Config:
        url: Target URL (required)
        method: HTTP method (default: POST)
        headers: Extra request headers
    """

    action_type = ActionType.WEBHOOK.value
    display_name = "Webhook"

    async def execute(self, config: Dict[str, Any], trigger_data: Any, workspace_id: str) -> Dict[str, Any]:
        url = config.get("url")
        if not url:
            raise ActionError("Missing required config: url")
        if not self.settings.WEBHOOK_ALLOW_PRIVATE_NETWORKS:
            _validate_url_safety(url)

        method = (config.get("method") or "POST").upper()
        headers = {"Content-Type": "application/json", **(config.get("headers") or {})}

        try:
            response = await self.collaborators.http.request(
                url=url,
                method=method,
                headers=headers,
                body=trigger_data,
            )
        except httpx.HTTPError as e:
            raise ActionError(f"Webhook request failed: {e}")

        if not response.ok:
            raise ActionError(f"Webhook returned HTTP {response.status}")

        logger.info("Webhook delivered", url=url, method=method, status=response.status)
        return {"status": response.status, "success": True}


WEBHOOK_ACTION_TYPES = {
    WebhookAction.action_type: WebhookAction,
}
