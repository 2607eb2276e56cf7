from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from .error import ClientError, ServerError
from iam_core.app.errors import SERVICE_UNAVAILABLE
from iam_core.app.services.rate_limiter import IpAllowlist
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(
        status_code=exc.status_code, content={"error": error_dict}, headers=exc.headers
    )


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_database_error(request: Request, exc: SQLAlchemyError):
    error_dict = {"code": SERVICE_UNAVAILABLE.code, "message": SERVICE_UNAVAILABLE.message}
    logger.error(f"Database error on {request.url.path}: {exc.__class__.__name__}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"error": error_dict}
    )


def create_app(ApplicationConfig) -> FastAPI:
    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from iam_core.api.routes import admin, auth, health_check
    from iam_core.api.utils.rate_limit import RateLimitMiddleware, global_rules
    from iam_core.depends import close_rate_limiter, get_rate_limiter

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await close_rate_limiter()

    app = FastAPI(title="IAM Core API", version="0.1.0", lifespan=lifespan)

    def limiter_provider():
        return app.dependency_overrides.get(get_rate_limiter, get_rate_limiter)()

    default_rule, allowlisted_rule = global_rules()
    app.add_middleware(
        RateLimitMiddleware,
        limiter_provider=limiter_provider,
        default_rule=default_rule,
        allowlisted_rule=allowlisted_rule,
        allowlist=IpAllowlist.from_setting(ApplicationConfig.RATE_LIMIT_WHITELIST),
        enabled=ApplicationConfig.RATE_LIMIT_ENABLED,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(admin.router, tags=["Admin"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)

    return app
