# ==============================================================================
# Serve Command
# ==============================================================================
"""
Runs the HTTP collector under uvicorn.
"""

import logging
from typing import Annotated, Optional

import typer

from sessioncollector.utils.config import get_settings
from sessioncollector.utils.versions import get_collector_version

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for the service process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Suppress noisy third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def serve(
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Bind port")] = None,
    reload: Annotated[bool, typer.Option("--reload", help="Reload on code changes")] = False,
) -> None:
    """Start the HTTP collector.

    Examples:
        sessioncollector serve
        sessioncollector serve --port 9000
    """
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)

    bind_host = host or settings.collector.host
    bind_port = port or settings.collector.port
    logger.info(
        "Session collector v%s listening on %s:%d",
        get_collector_version(),
        bind_host,
        bind_port,
    )

    uvicorn.run(
        "sessioncollector.web.server:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_config=None,
    )
