"""LINE Messaging API broadcast client."""
from __future__ import annotations

import logging

import requests

LOGGER = logging.getLogger(__name__)


class BroadcastError(RuntimeError):
    """Raised when the LINE broadcast endpoint rejects a message."""

    def __init__(self, status_code: int, reason: str | None, body: str) -> None:
        super().__init__(f"LINE broadcast failed: {status_code} {reason or ''}\n{body}")
        self.status_code = status_code
        self.reason = reason
        self.body = body


class LineBroadcaster:
    """Sends text messages to every follower of the LINE official account."""

    DEFAULT_BASE_URL = "https://api.line.me"
    BROADCAST_PATH = "/v2/bot/message/broadcast"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 120,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    def broadcast_text(self, text: str) -> None:
        payload = {"messages": [{"type": "text", "text": text}]}
        response = self.session.post(
            f"{self.base_url}{self.BROADCAST_PATH}", json=payload, timeout=self.timeout
        )
        if not 200 <= response.status_code < 300:
            raise BroadcastError(response.status_code, response.reason, response.text)
        LOGGER.info("Broadcast %d characters", len(text))


__all__ = ["BroadcastError", "LineBroadcaster"]
