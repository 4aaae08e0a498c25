"""
Hotel Facilities Platform
Real-time relay publisher.

The room fan-out (socket connections, joins, broadcast) runs outside this
service. This module only publishes events onto Redis pub/sub channels that the
relay subscribes to, one channel per room:

    <REALTIME_CHANNEL_PREFIX><room>      e.g. facilities:room:managers

Message body (JSON):
    {"event": "work-order-created", "room": "managers",
     "payload": {...}, "timestamp": "2024-01-31T09:00:00+00:00"}

Publishing is fire-and-forget: the Redis call runs on a single background
worker thread, so a slow or unreachable relay never delays the request that
triggered it, and a relay failure is logged, never raised. Events still queued
at interpreter exit are delivered before the worker stops.
"""

from __future__ import annotations

import atexit
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import redis
from flask import Flask

logger = logging.getLogger(__name__)

# ── Rooms & events ───────────────────────────────────────────────────────────

ROOM_MANAGERS = "managers"
ROOM_TECHNICIANS = "technicians"

EVENT_WORK_ORDER_CREATED = "work-order-created"
EVENT_WORK_ORDER_UPDATED = "work-order-updated"
EVENT_PPM_SCHEDULE_UPDATED = "ppm-schedule-updated"
EVENT_SAFETY_INCIDENT_REPORTED = "safety-incident-reported"
EVENT_CERTIFICATE_EXPIRING = "certificate-expiring"


def build_message(room: str, event: str, payload: dict) -> str:
    """Serialise one relay message."""
    return json.dumps(
        {
            "event": event,
            "room": room,
            "payload": payload,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        default=str,
    )


class RealtimeRelay:
    """Publisher side of the room relay, registered as ``app.extensions["realtime"]``."""

    def __init__(self) -> None:
        self.enabled = False
        self.channel_prefix = "facilities:room:"
        self._client: redis.Redis | None = None
        self._executor: ThreadPoolExecutor | None = None

    def init_app(self, app: Flask) -> None:
        self.enabled = bool(app.config.get("REALTIME_ENABLED")) and bool(app.config.get("REDIS_URL"))
        self.channel_prefix = app.config.get("REALTIME_CHANNEL_PREFIX", self.channel_prefix)
        if self.enabled:
            self._client = redis.from_url(app.config["REDIS_URL"], socket_timeout=2)
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="realtime")
                atexit.register(self.shutdown)
        app.extensions["realtime"] = self
        logger.info("Realtime relay %s (prefix=%s)",
                    "enabled" if self.enabled else "disabled", self.channel_prefix)

    def publish(self, room: str, event: str, payload: dict) -> None:
        """Queue one event for the relay and return immediately."""
        body = build_message(room, event, payload)
        channel = f"{self.channel_prefix}{room}"
        if not self.enabled or self._executor is None:
            logger.debug("Realtime disabled, dropping %s for %s", event, channel)
            return
        self._executor.submit(self._send, channel, event, body)

    def shutdown(self) -> None:
        """Deliver queued events and stop the worker (atexit handler)."""
        executor, self._executor = self._executor, None
        if executor is None:
            return
        executor.shutdown(wait=True)
        logger.info("Realtime relay worker stopped")

    def _send(self, channel: str, event: str, body: str) -> None:
        try:
            receivers = self._client.publish(channel, body)
            logger.debug("Published %s to %s (%d receivers)", event, channel, receivers)
        except redis.RedisError as exc:
            logger.warning("Realtime publish failed for %s on %s: %s", event, channel, exc)


relay = RealtimeRelay()


def publish(room: str, event: str, payload: dict) -> None:
    """Module-level shortcut used by the services."""
    relay.publish(room, event, payload)
