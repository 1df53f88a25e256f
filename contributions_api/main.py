from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from contributions_api.api.routes.contributions import router
from contributions_api.cache import NullCache
from contributions_api.cache import TTLCache
from contributions_api.core.middleware import AccessLogMiddleware
from contributions_api.core.observability import init_sentry
from contributions_api.core.observability import setup_logging
from contributions_api.settings import Settings


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "; ".join(messages)})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        "Unhandled error on {} {}", request.method, request.url.path
    )
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application with middleware, handlers and cache."""

    settings = settings or Settings()
    setup_logging(settings)
    init_sentry(settings)

    app = FastAPI(title="GitHub Contributions API")
    app.state.settings = settings
    app.state.cache = (
        TTLCache(ttl_seconds=settings.cache_ttl_seconds)
        if settings.cache_enabled
        else NullCache()
    )

    app.add_middleware(GZipMiddleware, minimum_size=settings.gzip_minimum_size)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET"],
    )
    app.add_middleware(AccessLogMiddleware)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(router)
    return app


app = create_app()
