"""Pull stats from a wall connector and serve them as Prometheus metrics."""

import asyncio
import logging
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, generate_latest

from wallconnector_core.utils.logging import setup_logging

from .client import WallConnectorClient
from .collector import UptimeCollector, WallConnectorCollector
from .config import ExporterSettings


logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[ExporterSettings] = None,
    registry: CollectorRegistry = REGISTRY,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    settings = settings or ExporterSettings.from_env()

    client = WallConnectorClient(
        settings.target, timeout=settings.request_timeout, transport=transport
    )
    # Registries are built here so a bad metric table stops startup.
    collector = WallConnectorCollector.for_client(
        client, namespace=settings.namespace, timeout=settings.scrape_timeout
    )
    registry.register(collector)
    registry.register(UptimeCollector())

    app = FastAPI(title="Wall Connector Exporter", version="0.1.0")
    app.state.settings = settings
    app.state.client = client
    app.state.collector = collector

    # Sync handler: FastAPI runs it in a worker thread, where the collector
    # is free to start its own event loop for the scrape.
    def metrics():
        data = generate_latest(registry)
        media_type = CONTENT_TYPE_LATEST.split("; charset=")[0]
        return Response(content=data, media_type=media_type)

    app.add_api_route(settings.metrics_path, metrics, methods=["GET"])

    @app.get("/health")
    async def health_check():
        try:
            version = await asyncio.wait_for(
                client.version(settings.request_timeout), settings.request_timeout
            )
        except Exception as e:
            logger.warning(f"Health check against {settings.target} failed: {e}")
            return {"status": "degraded", "target": settings.target, "error": str(e)}

        return {
            "status": "ok",
            "target": settings.target,
            "device": version.model_dump(exclude_none=True),
        }

    logger.info(
        {
            "service": "wallconnector-exporter",
            "version": "0.1.0",
            "target": settings.target,
            "metrics_path": settings.metrics_path,
            "scrape_timeout": settings.scrape_timeout,
            "metrics": len({d.name for d in collector.describe_descriptors()}),
            "status": "starting",
        }
    )
    return app


def main():
    settings = ExporterSettings.from_env()
    setup_logging("wallconnector-exporter", settings.log_level)
    app = create_app(settings)
    logger.info(f"Listening on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
