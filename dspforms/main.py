"""DSP Forms FastAPI application."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api import api_router
from .auth import router as auth_router
from .core.config import settings
from .core.errors import FormsError, NotFoundError
from .core.logging_config import setup_logging
from .db.session import init_db
from .pages import render
from .pages import router as pages_router


def create_app() -> FastAPI:
    setup_logging(settings.service_name)
    logger = logging.getLogger(__name__)
    logger.info("Initializing %s %s", settings.app_name, settings.app_version)
    if not settings.auth_url:
        logger.warning("AUTH_URL not configured; every visitor will be treated as anonymous.")

    app = FastAPI(title=settings.app_name, version=settings.app_version)
    app.include_router(api_router, prefix=settings.api_prefix)
    app.include_router(auth_router)
    app.include_router(pages_router)

    @app.exception_handler(FormsError)
    async def _forms_error(request: Request, exc: FormsError):
        if request.url.path.startswith(settings.api_prefix):
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
        template = "errors/not_found.html" if isinstance(exc, NotFoundError) else "errors/error.html"
        return render(request, template, None, {"message": exc.message}, status_code=exc.status_code)

    @app.on_event("startup")
    def _bootstrap_database() -> None:
        init_db()

    return app


app = create_app()
