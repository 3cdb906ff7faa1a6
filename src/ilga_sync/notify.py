"""Notification delivery: one JSON POST per sync run."""

from __future__ import annotations

import logging

import requests

from .models import Notification

LOGGER = logging.getLogger(__name__)


class NotificationError(RuntimeError):
    """The notification endpoint could not be reached."""


def notification_to_dict(notification: Notification) -> dict:
    md = notification.bill_info
    return {
        "billInfo": {
            "assembly": md.assembly,
            "chamber": md.chamber.value,
            "number": md.number,
            "url": md.url,
        },
        "text": notification.text,
    }


class NotificationClient:
    def __init__(
        self,
        url: str,
        session: requests.Session | None = None,
        timeout: int = 20,
    ) -> None:
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout

    def send_batch(self, notifications: list[Notification]) -> int | None:
        """POST ``{"notifications": [...]}``; returns the HTTP status code.

        Returns None without sending when no endpoint is configured.
        """
        if not self.url:
            LOGGER.info("No notification URL configured; %d not sent.", len(notifications))
            return None
        payload = {"notifications": [notification_to_dict(n) for n in notifications]}
        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise NotificationError(f"couldn't deliver notifications: {exc}") from exc
        LOGGER.info("Sent %d notifications: HTTP %d", len(notifications), resp.status_code)
        return resp.status_code
