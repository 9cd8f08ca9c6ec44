"""FastAPI MCP Server for the Travel Planner."""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from . import __version__
from .api.deps import MCP_SESSION_ID_HEADER
from .config import Settings, settings as default_settings
from .mcp.jsonrpc import INTERNAL_ERROR, SERVER_ERROR, jsonrpc_error
from .mcp.protocol import SERVER_NAME, MCPProtocol
from .mcp.registry import ToolRegistry, build_default_registry
from .mcp.session import SessionManager
from .mcp_transport import router as mcp_router
from .middleware import SecurityHeadersMiddleware
from .models import ServerStatus

logger = logging.getLogger(__name__)

# ============ SENTRY INITIALIZATION ============


def _filter_sentry_event(event: dict) -> dict:
    """Remove session ids from Sentry events."""
    if "request" in event and "headers" in event["request"]:
        headers = event["request"]["headers"]
        for key in ["authorization", MCP_SESSION_ID_HEADER]:
            if key in headers:
                headers[key] = "[REDACTED]"
    return event


def _init_sentry(settings: Settings) -> None:
    """Initialize Sentry if a DSN is configured."""
    if not settings.sentry_dsn:
        logger.debug("Sentry DSN not configured - error tracking disabled")
        return
    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.starlette import StarletteIntegration
    except ImportError:
        logger.warning("Sentry DSN configured but sentry-sdk not installed")
        return

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.environment == "production" else 1.0,
        integrations=[
            FastApiIntegration(),
            StarletteIntegration(),
        ],
        before_send=lambda event, hint: _filter_sentry_event(event),
    )
    logger.info("Sentry error tracking initialized")


# ============ APPLICATION FACTORY ============


def create_app(
    settings: Settings | None = None,
    registry: ToolRegistry | None = None,
) -> FastAPI:
    """Build the application with its own session table and tool registry.

    Args:
        settings: Settings to use (defaults to the environment)
        registry: Tool registry (defaults to the five travel tools)

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings
    if registry is None:
        registry = build_default_registry()
    session_manager = SessionManager.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown."""
        logger.info(f"Starting Travel Planner MCP Server v{__version__} with {len(registry)} tools")
        if not settings.debug and settings.cors_origins_list == ["*"]:
            logger.warning(
                "CORS is configured to allow all origins ('*'). "
                "Set CORS_ALLOWED_ORIGINS to specific domains in production."
            )
        await session_manager.start()
        yield
        await session_manager.stop()

    app = FastAPI(
        title="Travel Planner MCP Server",
        description="MCP endpoint exposing travel planning tools over HTTP and SSE",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_manager = session_manager
    app.state.protocol = MCPProtocol(registry)

    _init_sentry(settings)

    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.environment == "production")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_origins_list != ["*"],
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", MCP_SESSION_ID_HEADER],
        expose_headers=[MCP_SESSION_ID_HEADER],
    )

    app.include_router(mcp_router)
    _register_exception_handlers(app)
    _register_health_routes(app)
    return app


# ============ EXCEPTION HANDLERS ============


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Render HTTP errors as JSON-RPC error bodies."""
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonrpc_error(None, SERVER_ERROR, str(exc.detail)),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with sanitized error messages."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=jsonrpc_error(None, INTERNAL_ERROR, "Internal error"),
        )


# ============ HEALTH ENDPOINTS ============


def _register_health_routes(app: FastAPI) -> None:
    @app.get("/health", response_class=PlainTextResponse, tags=["Health"])
    async def health_check() -> str:
        """Liveness probe."""
        return "OK"

    @app.get("/", response_model=ServerStatus, tags=["Health"])
    async def root(request: Request) -> ServerStatus:
        """Server info with the number of open sessions."""
        return ServerStatus(
            name=SERVER_NAME,
            version=__version__,
            status="healthy",
            timestamp=datetime.now(timezone.utc),
            active_sessions=len(request.app.state.session_manager),
            mcp="/mcp",
            health="/health",
        )


app = create_app()


# ============ MAIN ============


def main():
    """Run the server: uvicorn for HTTP, or stdio when MCP_TRANSPORT=stdio."""
    logging.basicConfig(
        level=default_settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if default_settings.mcp_transport == "stdio":
        from .stdio import run_stdio

        asyncio.run(run_stdio())
        return

    import uvicorn

    uvicorn.run(
        "travel_planner.server:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
        log_level=default_settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
