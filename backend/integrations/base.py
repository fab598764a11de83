"""Interfaces for the external systems that workflow actions delegate to.

Each collaborator returns a plain acknowledgement dict (or HttpResponse)
and signals failure by raising; the action dispatcher turns raised errors
into failed steps.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class HttpResponse:
    """Minimal view of an HTTP response."""

    status: int
    ok: bool


class EmailSender(ABC):
    @abstractmethod
    async def send(self, to: Any, subject: str, body: str) -> dict:
        """Send an email; returns {"sent": bool, ...}."""
        ...


class NotificationSender(ABC):
    @abstractmethod
    async def send(self, message: str, workspace_id: str, **extra: Any) -> dict:
        """Deliver a push/in-app notification; returns {"sent": bool, ...}."""
        ...


class AlertCreator(ABC):
    @abstractmethod
    async def create(self, name: str, workspace_id: str, **config: Any) -> dict:
        """Create an alert; returns {"created": bool, "id": ...}."""
        ...


class WidgetUpdater(ABC):
    @abstractmethod
    async def update(self, widget_id: str, workspace_id: str, **changes: Any) -> dict:
        """Mutate a dashboard widget; returns {"updated": bool, ...}."""
        ...


class HttpClient(ABC):
    @abstractmethod
    async def request(
        self,
        url: str,
        method: str,
        headers: Optional[dict] = None,
        body: Any = None,
    ) -> HttpResponse:
        """Perform one outbound HTTP call."""
        ...


class ChatPoster(ABC):
    @abstractmethod
    async def post(self, channel: str, message: str) -> dict:
        """Post a chat message; returns {"sent": bool, ...}."""
        ...
