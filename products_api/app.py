from contextlib import asynccontextmanager
from typing import Optional

from azure.cosmos import exceptions as cosmos_exceptions
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from products_api.config import Settings, load_settings
from products_api.db import CosmosStore
from products_api.logging_config import logger, set_log_level, tracer
from products_api.routes.product_route import router as product_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Products API starting",
        extra={"database": app.state.store.settings.cosmosdb_database},
    )
    yield
    await app.state.store.close()


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    logger.info(
        "Rejected invalid request payload",
        extra={"path": request.url.path, "error_count": len(errors)},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": errors},
    )


async def handle_cosmos_http_error(
    request: Request, exc: cosmos_exceptions.CosmosHttpResponseError
):
    with tracer.start_as_current_span("handle_cosmos_error") as span:
        span.set_attribute("error", True)
        span.set_attribute("error.type", "cosmos_http_error")
        span.set_attribute("error.status_code", exc.status_code)

        logger.error(
            "Cosmos DB HTTP error",
            extra={
                "status_code": exc.status_code,
                "error_message": str(exc),
                "path": request.url.path
            },
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "A database error occurred."},
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Settings are resolved here, so a missing COSMOSDB_ENDPOINT fails at
    startup with ConfigurationError instead of on the first request.
    """
    settings = settings or load_settings()
    set_log_level(settings.log_level)

    app = FastAPI(
        title="Products API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = CosmosStore(settings)

    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(
        cosmos_exceptions.CosmosHttpResponseError, handle_cosmos_http_error
    )
    app.include_router(product_router)

    return app
