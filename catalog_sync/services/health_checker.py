# catalog_sync/services/health_checker.py

"""Backend connectivity health checker."""

import asyncio
import logging
import time
from dataclasses import dataclass

from catalog_sync.clients.resource_client import ResourceClient
from catalog_sync.config.settings import Settings
from catalog_sync.models.errors import CatalogError

logger = logging.getLogger("catalog_sync.health")


@dataclass
class HealthResult:
    """Result of probing one resource collection."""

    resource: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


async def probe_resource(
    client: ResourceClient, resource: str, path: str,
) -> HealthResult:
    """GET a collection root and classify the outcome."""
    start = time.monotonic()
    try:
        await client.probe(path)
    except CatalogError as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            resource=resource,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )

    elapsed_ms = (time.monotonic() - start) * 1000
    if elapsed_ms > Settings.SLOW_THRESHOLD_MS:
        return HealthResult(
            resource=resource,
            status="slow",
            latency_ms=elapsed_ms,
            message="High latency",
        )
    return HealthResult(
        resource=resource,
        status="ok",
        latency_ms=elapsed_ms,
        message="",
    )


class HealthChecker:
    """Probes both resource collections concurrently."""

    def __init__(self, client: ResourceClient) -> None:
        self.client = client
        self.resources = {
            "products": Settings.PRODUCTS_PATH,
            "comments": Settings.COMMENTS_PATH,
        }

    async def check_all(self) -> list[HealthResult]:
        tasks = [
            probe_resource(self.client, name, path)
            for name, path in self.resources.items()
        ]
        results: list[HealthResult] = list(
            await asyncio.gather(*tasks)
        )
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.resource,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
