from contextlib import asynccontextmanager
from textwrap import dedent
import logging
from typing import AsyncIterator, Optional

import pydantic
from fastapi import FastAPI
from fastapi.routing import APIRoute
from fastapi.middleware.cors import CORSMiddleware

from files_gateway.adapters.object_store import ObjectStoreClient, create_object_store
from files_gateway.config.settings import Settings
from files_gateway.errors import (
    GatewayError,
    handle_broad_exceptions,
    handle_gateway_errors,
    handle_pydantic_validation_errors,
)
from files_gateway.routers.health import router as health_router
from files_gateway.routers.objects import router as objects_router
from files_gateway.services.gateway import GatewayService

# Set up logging
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    object_store: Optional[ObjectStoreClient] = None,
) -> FastAPI:
    """
    Create a FastAPI application.

    :param settings: Settings to run with; read from the environment when omitted.
    :param object_store: Store to serve from. When omitted, one is built for
        ``settings.deployment_mode`` at startup and closed at shutdown.
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        store = object_store or create_object_store(settings)
        app.state.gateway = GatewayService(store, settings.public_base_url)
        logger.info(f"Files gateway started in {settings.deployment_mode} mode (bucket={settings.s3_bucket_name})")
        try:
            yield
        finally:
            if object_store is None:
                store.close()
            logger.info("Files gateway stopped")

    app = FastAPI(
        title="Files Gateway",
        summary="List, upload and download objects in an S3-compatible bucket",
        version="v1",
        description=dedent(
            """\
        | Endpoint | Notes |
        | --- | --- |
        | `GET /v1/objects` | list objects, optionally under a `prefix` |
        | `PUT /v1/objects/{path}` | upload the raw request body |
        | `POST /v1/objects` | multipart upload, path defaults to the filename |
        | `GET /v1/objects/{path}` | download as `application/octet-stream` |
        """
        ),
        docs_url="/",  # its easier to find the docs when they live on the base url
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings

    app.include_router(objects_router, prefix="/v1", tags=["objects"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(
        exc_class_or_status_code=GatewayError,
        handler=handle_gateway_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    settings = Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000)
