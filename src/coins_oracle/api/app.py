"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coins_oracle import __version__
from coins_oracle.bootstrap import new_resolver
from coins_oracle.config import get_settings
from coins_oracle.errors import NotFoundError
from coins_oracle.resolver import CoinResolver


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    yield
    # Shutdown
    await app.state.resolver.close()


async def asset_not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": f"asset: {exc.asset_id} was not found"})


def create_app(resolver: Optional[CoinResolver] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        resolver: Pre-built resolver; by default every supported client
            is built from settings
    """
    settings = get_settings()

    app = FastAPI(
        title="coins-oracle API",
        description="Uniform chain status, balance and transaction queries",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.resolver = resolver if resolver is not None else new_resolver(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(NotFoundError, asset_not_found_handler)

    # Register routes
    from coins_oracle.api.routes import health, nodes

    app.include_router(health.router, tags=["Health"])
    app.include_router(nodes.router, tags=["Nodes"])

    return app
