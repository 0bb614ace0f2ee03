"""Man in the middle proxy for a wall connector.

Forwards every request to the real device and logs both sides of the exchange,
which is how the status payloads were worked out in the first place.
"""

import logging
import os
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import Response

from wallconnector_core.utils.logging import setup_logging


logger = logging.getLogger(__name__)

# Hop-by-hop and length headers are recomputed for the client.
DROPPED_HEADERS = {"connection", "content-encoding", "content-length", "transfer-encoding"}
FORWARDED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _dump_headers(headers) -> str:
    return "\n".join(f"{k}: {v}" for k, v in headers.items())


def create_app(
    target: Optional[str] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    target = target or os.getenv("PROXY_TARGET", "localhost:8081")
    timeout = timeout or float(os.getenv("PROXY_TIMEOUT", "10"))
    base_url = target if "://" in target else f"http://{target}"

    app = FastAPI(title="Wall Connector Proxy", version="0.1.0")

    @app.api_route("/{path:path}", methods=FORWARDED_METHODS)
    async def forward(path: str, request: Request):
        body = await request.body()
        query = f"?{request.url.query}" if request.url.query else ""
        logger.info(
            f"request:\n{request.method} {request.url.path}{query}\n"
            f"{_dump_headers(request.headers)}\n\n{body.decode(errors='replace')}"
        )

        headers = {
            k: v
            for k, v in request.headers.items()
            if k.lower() != "host" and k.lower() not in DROPPED_HEADERS
        }
        try:
            async with httpx.AsyncClient(
                base_url=base_url, timeout=timeout, transport=transport
            ) as client:
                upstream = await client.request(
                    request.method,
                    f"/{path}",
                    params=request.query_params,
                    headers=headers,
                    content=body,
                )
        except httpx.HTTPError as e:
            logger.error(f"error forwarding request: {e}")
            return Response(content=str(e), status_code=502, media_type="text/plain")

        logger.info(
            f"response:\n{upstream.status_code}\n{_dump_headers(upstream.headers)}\n\n"
            f"{upstream.text}"
        )

        return Response(
            content=upstream.content,
            status_code=upstream.status_code,
            headers={
                k: v for k, v in upstream.headers.items() if k.lower() not in DROPPED_HEADERS
            },
        )

    return app


def main():
    setup_logging("wallconnector-proxy", os.getenv("LOG_LEVEL", "INFO"))
    host = os.getenv("PROXY_HOST", "localhost")
    port = int(os.getenv("PROXY_PORT", "8080"))
    logger.info(f"listening on {host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
