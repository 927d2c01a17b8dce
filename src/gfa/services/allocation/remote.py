"""HTTP client for an offloaded GFA optimizer, with local fallback."""

from __future__ import annotations

import logging
import time

import httpx

from ...config import settings
from ...schemas.allocation import GFARequest, GFAResponse
from .service import optimize_gfa

OPTIMIZE_PATH = "/api/optimize-gfa"

logger = logging.getLogger(__name__)

# Remote KPI names that differ from the local response shape.
REMOTE_KPI_ALIASES = {
    "transportationCost": "transportCost",
    "facilityCost": "fixedCost",
    "totalFulfilled": "allocatedDemand",
    "numSites": "facilitiesUsed",
}


def reconcile_remote_payload(payload: dict, request: GFARequest) -> dict:
    """Normalize a remote optimizer payload to the local response shape."""

    rate = request.settings.transport_cost_per_km
    if rate is None:
        rate = settings.transport_cost_per_km

    kpis = dict(payload.get("kpis") or {})
    for remote_name, local_name in REMOTE_KPI_ALIASES.items():
        if remote_name in kpis and local_name not in kpis:
            kpis[local_name] = kpis.pop(remote_name)
    kpis.setdefault("totalCost", kpis.get("transportCost", 0) + kpis.get("fixedCost", 0))

    allocation = []
    for item in payload.get("allocation") or []:
        record = dict(item)
        if "transportCost" not in record:
            record["transportCost"] = record.get("distance", 0) * rate * record.get("quantity", 0)
        allocation.append(record)

    return {
        **payload,
        "success": payload.get("success", True),
        "mode": payload.get("mode", "greedy"),
        "allocation": allocation,
        "kpis": kpis,
        "facilityUsage": payload.get("facilityUsage") or [],
    }


class RemoteAllocatorClient:
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.remote_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("Remote GFA base URL is not configured.")
        self.timeout = timeout if timeout is not None else settings.remote_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.remote_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.remote_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    def optimize(self, request: GFARequest) -> GFAResponse:
        payload = request.model_dump(mode="json", by_alias=True, exclude_none=True)
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.post(OPTIMIZE_PATH, json=payload)
                    response.raise_for_status()
                    return GFAResponse.model_validate(reconcile_remote_payload(response.json(), request))
                except (httpx.TimeoutException, httpx.NetworkError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Remote GFA optimizer at {self.base_url} unreachable after {attempt} attempts: {exc}"
                        ) from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(
                        f"Remote GFA request failed, retrying in {wait_time:.1f}s "
                        f"(attempt {attempt}/{self.max_retries}): {exc}"
                    )
                    time.sleep(wait_time)
        finally:
            client.close()


def run_with_fallback(
    request: GFARequest,
    client: RemoteAllocatorClient | None = None,
    *,
    use_remote: bool = True,
) -> tuple[GFAResponse, bool]:
    """Optimize remotely when configured, otherwise (or on failure) locally.

    Returns the response and whether the remote service produced it.
    """

    if use_remote and (client is not None or settings.remote_base_url):
        try:
            remote = client or RemoteAllocatorClient()
            return remote.optimize(request), True
        except (httpx.HTTPError, ConnectionError, ValueError) as exc:
            logger.warning(f"Remote GFA optimization failed, falling back to local: {exc}")

    return optimize_gfa(request), False
