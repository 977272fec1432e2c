import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pricewise.config import get_settings
from pricewise.routers.admin import router as admin_router
from pricewise.routers.prices import router as prices_router
from pricewise.routers.products import router as products_router
from pricewise.services.catalog import CatalogClient
from pricewise.services.gateway import HttpGateway, RemoteGateway

settings = get_settings()

logger = logging.getLogger(__name__)


def create_app(gateway: Optional[RemoteGateway] = None) -> FastAPI:
    """Build the API. Without a gateway, one is opened to the configured store."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create the session catalog on startup and close the gateway on shutdown."""
        logging.basicConfig(level=settings.log_level)
        owned = gateway is None
        remote = HttpGateway() if owned else gateway
        if owned:
            logger.info(f"Connecting to remote store at {settings.remote_api_url}")
        app.state.catalog = CatalogClient(remote)
        yield
        logger.info("Shutting down...")
        if owned:
            await remote.aclose()

    app = FastAPI(
        title="Pricewise API",
        description="Catalog products and compare store prices",
        version="1.0.0",
        lifespan=lifespan
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(products_router, prefix=settings.api_prefix)
    app.include_router(prices_router, prefix=settings.api_prefix)
    app.include_router(admin_router, prefix=settings.api_prefix)

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "app": "Pricewise API",
            "version": "1.0.0"
        }

    return app


app = create_app()
