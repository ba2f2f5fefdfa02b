import logging
from typing import Optional

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..config import Settings
from ..domain.exceptions import DomainError
from ..logging_config import setup_logging
from .cors import CorsMiddleware
from .dependencies import Services
from .errors import domain_error_handler, request_validation_handler, unhandled_error_handler
from .routes import ROUTERS

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Arma la aplicación con sus colaboradores en `app.state.services`.

    Uso con uvicorn: `uvicorn --factory consultorio.api:create_app`.
    """
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    app = FastAPI(title="Consultorio", version="1.0.0")
    app.state.services = Services.build(settings)
    app.add_middleware(CorsMiddleware, allowed_origins=settings.allowed_origins)
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    for router in ROUTERS:
        app.include_router(router)

    @app.api_route("/{full_path:path}", methods=ALL_METHODS, include_in_schema=False)
    def method_not_allowed(full_path: str):
        return JSONResponse(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED, content={"message": "Method Not Allowed"}
        )

    logger.info("Aplicación iniciada (db=%s, orígenes=%s)", settings.database_path, settings.allowed_origins)
    return app
