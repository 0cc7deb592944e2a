"""Application entrypoint.

Creates the FastAPI app, configures logging and request metrics, and
includes routers. Parsing and reduction live in php_outline/outline.
"""

import time

from php_outline.app.core.config import get_settings, load_env

load_env()

from fastapi import FastAPI, Request  # noqa: E402

from php_outline.app.api.routes import filter_from_query, router as outline_router  # noqa: E402
from php_outline.app.core.logging import (  # noqa: E402
    format_bytes,
    format_duration,
    get_logger,
    peak_memory_bytes,
    setup_logging,
)

logger = get_logger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    logger.info("Starting PHP outline service (log_level=%s)", settings.LOG_LEVEL)
    app = FastAPI(title="PHP Outline")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):  # type: ignore[no-untyped-def]
        started = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        path = request.query_params.get("path")
        filter_mode = filter_from_query(request.query_params.get("public"))
        logger.info(
            "[HTTP] Request from %s: path=%s, filter=%s",
            client_ip,
            path or "none",
            filter_mode.value,
        )

        response = await call_next(request)

        tokens = response.headers.get("content-length", "0")
        memory = format_bytes(peak_memory_bytes())
        duration = format_duration(time.perf_counter() - started)
        error = getattr(request.state, "error", None)
        if error is not None:
            logger.warning(
                '[HTTP] Error Response: status=%d, error="%s", tokens=%s, memory=%s, duration=%s',
                response.status_code,
                error,
                tokens,
                memory,
                duration,
            )
        else:
            logger.info(
                "[HTTP] Response: status=%d, tokens=%s, memory=%s, duration=%s",
                response.status_code,
                tokens,
                memory,
                duration,
            )
        return response

    app.include_router(outline_router)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
