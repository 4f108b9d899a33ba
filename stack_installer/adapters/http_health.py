"""HTTP health endpoint probe backed by httpx."""

from __future__ import annotations

import httpx

from stack_installer.config import get_logger
from stack_installer.domain import ProbeOutcome

from .interfaces import HealthProbePort

logger = get_logger(__name__)


class HttpHealthProbe(HealthProbePort):
    """Probe that issues one GET per call and classifies the status code."""

    def __init__(self, client: httpx.Client):
        """Initialize HTTP health probe.

        Args:
            client: Shared httpx client carrying timeout configuration.

        Raises:
            ValueError: Raised when client is None.
        """

        if client is None:
            raise ValueError("client must not be None")
        self._client = client

    def adapter_probe(self, url: str, expected_status: int | None = None) -> ProbeOutcome:
        """Probe one health endpoint once.

        Args:
            url: Health endpoint URL.
            expected_status: Exact status required; `None` accepts any 2xx.

        Returns:
            ProbeOutcome: Ready when the status matches; transport errors are not-ready outcomes.
        """

        try:
            response = self._client.get(url)
        except httpx.HTTPError as error:
            logger.debug("health_probe_transport_error", url=url, error=str(error))
            return ProbeOutcome(ready=False, detail=f"transport error: {error.__class__.__name__}")

        if expected_status is None:
            ready = response.is_success
        else:
            ready = response.status_code == expected_status
        return ProbeOutcome(ready=ready, detail=f"HTTP {response.status_code}")
