"""Review notifications.

Review transitions emit a ``NotificationEvent``; the dispatcher turns it into
a send request for the external notification service. Delivery happens after
the transition is committed and its failures are only logged.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Any, Optional, Protocol
from uuid import UUID

import httpx

from ..core.config import get_settings
from ..models import Achievement

logger = logging.getLogger(__name__)


class NotificationKind(str, enum.Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


TEMPLATES = {
    NotificationKind.APPROVED: "achievement_approved",
    NotificationKind.REJECTED: "achievement_rejected",
}


@dataclass(frozen=True)
class TeacherContact:
    email: str
    name: str


@dataclass(frozen=True)
class AchievementSummary:
    achievement_id: UUID
    title: str
    category: str
    date_achieved: Optional[date] = None
    remarks: Optional[str] = None
    points_awarded: Optional[int] = None


@dataclass(frozen=True)
class NotificationEvent:
    """What to tell a teacher about a review decision."""

    kind: NotificationKind
    contact: TeacherContact
    summary: AchievementSummary
    reason: Optional[str] = None

    @classmethod
    def for_achievement(
        cls,
        kind: NotificationKind,
        achievement: Achievement,
        reason: Optional[str] = None,
    ) -> "NotificationEvent":
        teacher = achievement.teacher
        return cls(
            kind=kind,
            contact=TeacherContact(email=teacher.email, name=teacher.full_name),
            summary=AchievementSummary(
                achievement_id=achievement.achievement_id,
                title=achievement.title,
                category=achievement.category.value,
                date_achieved=achievement.date_achieved,
                remarks=achievement.remarks,
                points_awarded=achievement.points_awarded,
            ),
            reason=reason,
        )


def build_send_request(event: NotificationEvent, sender: str) -> dict[str, Any]:
    """Structured request: recipient, template selection and substitution values."""

    summary = event.summary
    values: dict[str, Any] = {
        "teacher_name": event.contact.name,
        "title": summary.title,
        "category": summary.category,
        "date_achieved": summary.date_achieved.isoformat() if summary.date_achieved else "-",
        "remarks": summary.remarks or "-",
    }
    if event.kind is NotificationKind.APPROVED:
        subject = f'Your Document "{summary.title}" Has Been Approved!'
        values["points_awarded"] = summary.points_awarded
    else:
        subject = f'Your Document "{summary.title}" Has Been Rejected'
        values["reason"] = event.reason or "No reason provided."

    return {
        "from": sender,
        "to": [event.contact.email],
        "subject": subject,
        "template": TEMPLATES[event.kind],
        "values": values,
        "reference": str(summary.achievement_id),
    }


class NotificationTransport(Protocol):
    def send(self, request: dict[str, Any]) -> None:
        """Deliver ``request`` or raise."""


class LoggingTransport:
    """Used when no notification service is configured."""

    def send(self, request: dict[str, Any]) -> None:
        logger.info("notification (not sent, no service configured) to %s: %s", request["to"], request["subject"])


class HttpTransport:
    """POSTs send requests to the notification service."""

    def __init__(
        self,
        url: str,
        *,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    def send(self, request: dict[str, Any]) -> None:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        if self._client is not None:
            response = self._client.post(self.url, json=request, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return

        with httpx.Client(timeout=self.timeout) as client:
            response = client.post(self.url, json=request, headers=headers)
            response.raise_for_status()


class NotificationDispatcher:
    """Delivers events with a small bounded retry; never raises."""

    def __init__(
        self,
        transport: NotificationTransport,
        *,
        sender: str,
        max_attempts: int = 3,
        backoff_seconds: float = 0.5,
    ) -> None:
        self.transport = transport
        self.sender = sender
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds

    def notify(self, event: Optional[NotificationEvent]) -> bool:
        """Send ``event``; returns whether delivery succeeded."""

        if event is None:
            return False

        request = build_send_request(event, self.sender)
        for attempt in range(1, self.max_attempts + 1):
            try:
                self.transport.send(request)
            except (httpx.HTTPError, OSError) as exc:
                logger.warning(
                    "notification %s for achievement %s failed (attempt %d/%d): %s",
                    event.kind.value,
                    event.summary.achievement_id,
                    attempt,
                    self.max_attempts,
                    exc,
                )
                if attempt < self.max_attempts and self.backoff_seconds:
                    time.sleep(self.backoff_seconds * attempt)
                continue
            except Exception:
                logger.exception(
                    "notification %s for achievement %s failed unexpectedly",
                    event.kind.value,
                    event.summary.achievement_id,
                )
                return False

            logger.info(
                "notification %s sent to %s for achievement %s",
                event.kind.value,
                event.contact.email,
                event.summary.achievement_id,
            )
            return True

        logger.error(
            "giving up on notification %s for achievement %s after %d attempts",
            event.kind.value,
            event.summary.achievement_id,
            self.max_attempts,
        )
        return False


@lru_cache(maxsize=1)
def get_dispatcher() -> NotificationDispatcher:
    """Return the dispatcher configured from settings."""

    settings = get_settings()
    if settings.notification_url:
        transport: NotificationTransport = HttpTransport(
            settings.notification_url,
            api_key=settings.notification_api_key,
            timeout=settings.notification_timeout_seconds,
        )
    else:
        transport = LoggingTransport()
    return NotificationDispatcher(
        transport,
        sender=settings.notification_sender,
        max_attempts=settings.notification_max_attempts,
        backoff_seconds=settings.notification_retry_backoff_seconds,
    )
