"""
Forward canonical events over HTTP(S) to a collector endpoint
(Splunk HEC, Elastic ingest, generic webhooks).
"""
import logging
from typing import Optional

import requests
from jsonschema import ValidationError

from log_normalizer.normalizers.models import CanonicalEvent, event_to_dict
from log_normalizer.normalizers.schema import validate_event

from .base import ForwardError

logger = logging.getLogger(__name__)


class HTTPForwarder:
    """
    POST JSON events to ``url``.

    Args:
        url: Collector endpoint
        token: Optional bearer token, sent as ``Authorization: Bearer <token>``
        headers: Extra headers added to every request
        timeout: Request timeout in seconds
    """

    def __init__(self, url: str, token: str = "", headers: Optional[dict] = None, timeout: float = 10.0):
        self.url = url
        self.token = token
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["Content-Type"] = "application/json"
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"
        for key, value in (headers or {}).items():
            self.session.headers[key] = value

    def _encode(self, event: CanonicalEvent) -> dict:
        payload = event_to_dict(event)
        try:
            validate_event(payload)
        except ValidationError as e:
            raise ForwardError(f"event {event.event_id} does not match schema: {e.message}") from e
        return payload

    def _post(self, payload) -> None:
        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ForwardError(f"failed to send to SIEM: {e}") from e
        if not 200 <= resp.status_code < 300:
            logger.warning("SIEM rejected payload", extra={
                'url': self.url, 'status_code': resp.status_code
            })
            raise ForwardError(f"SIEM returned status {resp.status_code}")

    def forward(self, event: CanonicalEvent) -> None:
        self._post(self._encode(event))

    def forward_batch(self, events) -> None:
        """Send all events as one JSON array in a single request."""
        self._post([self._encode(e) for e in events])

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
