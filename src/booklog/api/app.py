"""
Main FastAPI application for Booklog backend
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..auth.tokens import TokenSigner
from ..config import Settings, settings
from ..events.broadcaster import EventBroadcaster
from ..logging import configure_logging, get_logger
from ..middleware import LoggingContextMiddleware
from ..store.base import EntityStore
from ..store.factory import create_entity_store

# Configure logging before creating logger
configure_logging(debug=settings.debug, level=settings.log_level)
logger = get_logger(__name__)


def create_app(
    config: Settings | None = None,
    store: EntityStore | None = None,
    broadcaster: EventBroadcaster | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Settings to use instead of the environment-loaded ones
        store: Entity store to use instead of the configured backend
        broadcaster: Event broadcaster to share with the caller (a fresh one by default)
    """
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting Booklog API...", store_backend=config.store_backend)

        # An unreachable store is fatal at startup
        app.state.store = store or await create_entity_store(config)
        app.state.broadcaster = broadcaster or EventBroadcaster()
        app.state.signer = TokenSigner.from_settings(config)

        yield

        logger.info("Shutting down Booklog API...")
        await app.state.broadcaster.close()
        if store is None:
            await app.state.store.close()

    app = FastAPI(
        title="Booklog API",
        description="GraphQL catalog of authors, books and users",
        version="0.1.0",
        lifespan=lifespan,
        debug=config.debug,
    )

    app.add_middleware(LoggingContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Health check endpoint."""
        return {"status": "healthy", "version": "0.1.0"}

    from ..graphql.schema import create_graphql_router, validate_schema

    # Validate schema at startup to catch type resolution errors early
    logger.info("Validating GraphQL schema...")
    validate_schema()

    app.include_router(create_graphql_router(), prefix="")
    logger.info("GraphQL endpoint initialized successfully", endpoint="/graphql")

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "booklog.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
