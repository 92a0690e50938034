"""FastAPI application exposing analysis, trading, research, and MCP routes."""

import logging
from importlib.metadata import version as pkg_version

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trading_mcp.api.dependencies import get_settings
from trading_mcp.api.routes import (
    analysis_router,
    mcp_router,
    research_router,
    trading_router,
)
from trading_mcp.config import ServerSettings
from trading_mcp.errors import TradingError

APP_VERSION = pkg_version("trading-mcp")

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="trading-mcp", version=APP_VERSION)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(analysis_router)
    app.include_router(trading_router)
    app.include_router(research_router)
    app.include_router(mcp_router)

    @app.exception_handler(TradingError)
    async def trading_error_handler(request: Request, exc: TradingError):
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=400, content={"error": {"message": str(exc)}})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            "500 - %s - %s %s", exc, request.method, request.url.path, exc_info=exc
        )
        return JSONResponse(
            status_code=500, content={"error": {"message": "Internal Server Error"}}
        )

    @app.get("/health")
    def health():
        return {"status": "ok", "message": "MCP server is running"}

    @app.get("/mcp-info")
    def mcp_info(settings: ServerSettings = Depends(get_settings)):
        return {
            "provider": settings.mcp_provider_name,
            "version": settings.mcp_version,
            "status": "active",
            "capabilities_endpoint": "/api/mcp/capabilities",
            "context_endpoint": "/api/mcp/context",
        }

    return app


app = create_app()
