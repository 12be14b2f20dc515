# ==============================================================================
# HTTP Collector Service
# ==============================================================================
"""
FastAPI application exposing the session collector over HTTP.

Routes:
- POST /collect   Ingest a data point, or close the current session
- GET  /health    Service and store reachability

CORS preflight requests are answered by CORSMiddleware and never reach the
lifecycle. The store and lifecycle manager are built once per process by
create_app() and kept on app.state for the lifetime of the process.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from sessioncollector.base.session_store import SessionStore
from sessioncollector.core.errors import CollectorError, StoreFailure
from sessioncollector.core.lifecycle import SessionLifecycleManager
from sessioncollector.core.normalizer import normalize_raw_request
from sessioncollector.utils.config import Settings, get_settings
from sessioncollector.utils.versions import get_collector_version

logger = logging.getLogger(__name__)

CORS_ALLOW_METHODS = ["POST", "OPTIONS", "GET"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization", "Accept"]
CORS_MAX_AGE = 86400


def create_app(
    *,
    store: SessionStore | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Build the collector application.

    Args:
        store: Session store to use. If None, a ValkeySessionStore is
            created from settings.
        settings: Application settings. If None, uses get_settings().
    """
    if settings is None:
        settings = get_settings()

    if store is None:
        from sessioncollector.infrastructure.session_store import ValkeySessionStore

        store = ValkeySessionStore(key_prefix=settings.valkey.key_prefix)

    lifecycle = SessionLifecycleManager(
        store, max_conflict_attempts=settings.collector.max_conflict_attempts
    )
    strict_website_name = settings.collector.strict_website_name

    app = FastAPI(
        title="Session Collector",
        description="Collects visitor data points into fingerprint-keyed sessions",
        version=get_collector_version(),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.collector.allowed_origins,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
        max_age=CORS_MAX_AGE,
    )
    app.state.store = store
    app.state.lifecycle = lifecycle

    @app.get("/health")
    async def healthcheck():
        reachable = await run_in_threadpool(store.ping)
        if not reachable:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "degraded", "store": "unreachable"},
            )
        return {"status": "ok", "store": "ok"}

    @app.post("/collect")
    async def collect(request: Request):
        raw = await request.body()
        ingest = normalize_raw_request(raw, strict_website_name=strict_website_name)
        try:
            outcome = await run_in_threadpool(lifecycle.handle, ingest)
        except CollectorError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error in session collector: %s", exc)
            raise StoreFailure(str(exc)) from exc
        return outcome.to_payload()

    @app.exception_handler(CollectorError)
    async def handle_collector_error(_: Request, exc: CollectorError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    return app


__all__ = ["create_app"]
