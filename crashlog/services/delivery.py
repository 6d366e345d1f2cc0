"""
Report Delivery
===============
Sends one formatted payload to the crash-aggregation endpoint.

One synchronous POST per call, no retries. The API key travels both in the
JSON body ("apiKey") and in a request header. TLS is chosen by destination
port: 443 uses https, every other port plain http.
"""
import json
import logging
from typing import Any, Optional

import httpx

from crashlog.core import constants as C
from crashlog.core.errors import DeliveryError

logger = logging.getLogger(__name__)

_TLS_PORT = 443
_DEFAULT_PORTS = {"https": 443, "http": 80}


def resolve_endpoint(endpoint: str) -> httpx.URL:
    """
    Build the request URL for ``endpoint``.

    The scheme follows the effective port (https only on 443) and an empty
    path becomes "/".
    """
    url = httpx.URL(endpoint)
    if not url.host:
        raise ValueError(f"endpoint must be an absolute URL: {endpoint!r}")
    port = url.port or _DEFAULT_PORTS.get(url.scheme, 80)
    scheme = "https" if port == _TLS_PORT else "http"
    return url.copy_with(scheme=scheme, port=port, path=url.path or "/")


def encode_payload(payload: dict[str, Any], api_key: str) -> bytes:
    """Canonical JSON body with the API key embedded at the top level."""
    body = {"apiKey": api_key, **payload}
    return json.dumps(body, sort_keys=True, separators=(",", ":")).encode("utf-8")


class ReportDelivery:
    """
    HTTP client for one endpoint.

    Usage:
        delivery = ReportDelivery("https://notify.bugsnag.com")
        delivery.deliver(payload, api_key)
    """

    def __init__(self, endpoint: str, transport: Optional[httpx.BaseTransport] = None) -> None:
        self.url = resolve_endpoint(endpoint)
        self._transport = transport

    def _headers(self, api_key: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept-Encoding": "identity",
            C.API_KEY_HEADER: api_key,
            C.PAYLOAD_VERSION_HEADER: C.PAYLOAD_VERSION,
        }

    def deliver(self, payload: dict[str, Any], api_key: str) -> None:
        """
        POST ``payload`` to the endpoint.

        Raises
        ------
        DeliveryError
            Network failure or a response status outside 2xx.
        """
        body = encode_payload(payload, api_key)
        logger.info("Sending crash report to %s (%d bytes)", self.url, len(body))

        try:
            with httpx.Client(transport=self._transport) as client:
                response = client.post(self.url, content=body, headers=self._headers(api_key))
        except httpx.HTTPError as e:
            logger.error("Crash report delivery failed: %s", e)
            raise DeliveryError() from e

        if not response.is_success:
            logger.error("Crash report rejected: HTTP %d", response.status_code)
            raise DeliveryError(status_code=response.status_code)

        logger.info("Crash report accepted: HTTP %d", response.status_code)


def deliver(
    payload: dict[str, Any],
    endpoint_url: str,
    api_key: str,
    transport: Optional[httpx.BaseTransport] = None,
) -> None:
    """Send ``payload`` to ``endpoint_url`` once."""
    ReportDelivery(endpoint_url, transport=transport).deliver(payload, api_key)
