"""FastAPI application for the GitHub PR assistant."""

import time

import logfire
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pr_assistant.config import get_settings
from pr_assistant.webhooks import router as webhook_router

settings = get_settings()

logfire.configure(
    token=settings.logfire_token,
    environment=settings.environment,
    service_name="github-pr-assistant",
    send_to_logfire="if-token-present",
)

app = FastAPI(
    title="GitHub PR Assistant",
    description="Analyses pull requests with an LLM and posts a review summary.",
    version="0.1.0",
)

logfire.instrument_fastapi(app)

app.include_router(webhook_router, prefix=settings.api_prefix)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logfire.info(
        f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.0f}ms)",
        client=request.client.host if request.client else None,
    )
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == 404:
        message = f"Route {request.method} {request.url.path} not found"
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logfire.exception(f"Unhandled error on {request.method} {request.url.path}")
    content = {"success": False, "message": "Internal Server Error"}
    if not get_settings().is_production:
        content["error"] = type(exc).__name__
    return JSONResponse(status_code=500, content=content)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "github-pr-assistant"}


@app.get("/health")
async def health():
    """Health check with a summary of the loaded configuration."""
    settings = get_settings()
    return {
        "status": "healthy",
        "environment": settings.environment,
        "config": {
            "model": settings.openrouter_model,
            "max_files_to_analyze": settings.max_files_to_analyze,
            "github_token_set": bool(settings.github_token),
            "openrouter_key_set": bool(settings.openrouter_api_key),
            "webhook_secret_set": bool(settings.github_webhook_secret),
        },
    }


def run():
    """Run the server with uvicorn."""
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
