"""
Downstream event capture.

Capture is fire-and-forget: the runner awaits each call so events leave in
row order, but never inspects a result.
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Protocol

import httpx

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    async def capture(self, event_name: str, properties: Optional[Dict[str, Any]] = None) -> None:
        ...

    async def close(self) -> None:
        ...


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class HttpCaptureSink:
    """
    POSTs events to a PostHog-compatible /capture/ endpoint.

    Attributes:
        host: Base URL of the capture service
        api_key: Project API key sent with every event
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        host: str,
        api_key: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.host = host.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def capture_url(self) -> str:
        return f"{self.host}/capture/"

    def build_payload(self, event_name: str, properties: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        properties = dict(properties or {})
        payload = {
            "api_key": self.api_key,
            "event": event_name,
            "properties": properties,
            "distinct_id": properties.get("distinct_id"),
        }
        if properties.get("timestamp") is not None:
            payload["timestamp"] = properties["timestamp"]
        return payload

    async def capture(self, event_name: str, properties: Optional[Dict[str, Any]] = None) -> None:
        body = json.dumps(self.build_payload(event_name, properties), default=_json_default)
        try:
            response = await self._client.post(
                self.capture_url,
                content=body,
                headers={"Content-Type": "application/json"}
            )
            if response.status_code >= 400:
                logger.error(
                    f"Capture rejected event {event_name!r}: "
                    f"HTTP {response.status_code} {response.text[:200]}"
                )
        except httpx.HTTPError as e:
            logger.error(f"Capture failed for event {event_name!r}: {type(e).__name__}: {e}")

    async def close(self) -> None:
        await self._client.aclose()


class LoggingSink:
    """Logs events instead of sending them"""

    def __init__(self):
        self.captured = 0

    async def capture(self, event_name: str, properties: Optional[Dict[str, Any]] = None) -> None:
        self.captured += 1
        logger.info(f"Captured {event_name!r}: {json.dumps(properties or {}, default=_json_default)}")

    async def close(self) -> None:
        pass
