from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)


def _error_dict(error, message: str) -> dict:
    error_dict = {"code": error.code, "message": message}
    if error.field:
        error_dict["field"] = error.field
    return error_dict


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = _error_dict(exc.base_error, exc.base_error.message)
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = _error_dict(exc.base_error, "Internal server error")
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


def create_app(ApplicationConfig) -> FastAPI:
    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(title="Gate Access API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import access, access_logs, health_check, invitation

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(invitation.router, tags=["Invitations"])
    app.include_router(access.router, tags=["Access"])
    app.include_router(access_logs.router, tags=["Access Logs"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
