"""Sample FastAPI application hosted on Lambda through src.hosting.

Runs unchanged under uvicorn locally; src/lambda_handler.py is the Lambda
entry point for the same app.
"""

import base64
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import Response

from src.logging.hosting import get_logger, setup_logging

VERSION = "0.1.0"

# 1x1 transparent PNG
PIXEL_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle hooks."""
    setup_logging()
    get_logger().info("Sample app started")
    yield {"started_by": "lifespan"}
    get_logger().info("Sample app stopped")


app = FastAPI(
    title="Lambda Hosting Sample",
    description="FastAPI app served from AWS Lambda event sources",
    version=VERSION,
    lifespan=lifespan,
)


@app.get("/health")
async def health(request: Request):
    return {
        "status": "healthy",
        "version": VERSION,
        "started_by": getattr(request.state, "started_by", None),
    }


@app.post("/echo")
async def echo(request: Request):
    """Echo the request body, query string and a few request details."""
    body = await request.body()
    return {
        "method": request.method,
        "path": request.url.path,
        "query": dict(request.query_params),
        "body": body.decode("utf-8", errors="replace"),
        "content_type": request.headers.get("content-type"),
    }


@app.get("/pixel.png")
async def pixel():
    return Response(content=PIXEL_PNG, media_type="image/png")
