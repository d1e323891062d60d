import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from equipdash.config import Settings, configure_logging
from equipdash.core.errors import (
    PermissionDenied,
    RecordNotFound,
    RemediationError,
    StoreError,
    ValidationIndeterminate,
)
from equipdash.core.messages import INDETERMINATE_MESSAGE, translate_store_error
from equipdash.store.base import RecordStore
from equipdash.store.registry import open_store
from equipdash.web.deps import templates
from equipdash.web.routes.api import router as api_router
from equipdash.web.routes.conflicts import router as conflicts_router
from equipdash.web.routes.pages import router as pages_router
from equipdash.web.routes.records import router as records_router

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent


def _error(request: Request, status: int, message: str):
    if request.url.path.startswith("/api"):
        return JSONResponse({"detail": message}, status_code=status)
    return templates.TemplateResponse(
        request,
        "error.html",
        {"message": message},
        status_code=status,
    )


def create_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(title="equipdash")
    app.state.settings = settings
    app.state.store = store if store is not None else open_store(settings)

    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

    app.include_router(pages_router)
    app.include_router(conflicts_router)
    app.include_router(api_router)
    app.include_router(records_router)

    @app.exception_handler(ValidationIndeterminate)
    def on_indeterminate(request: Request, exc: ValidationIndeterminate):
        logger.warning("Validation indeterminate: %s", exc)
        return _error(request, 503, INDETERMINATE_MESSAGE)

    @app.exception_handler(RemediationError)
    def on_remediation(request: Request, exc: RemediationError):
        return _error(request, 409, str(exc))

    @app.exception_handler(PermissionDenied)
    def on_forbidden(request: Request, exc: PermissionDenied):
        return _error(request, 403, str(exc))

    @app.exception_handler(RecordNotFound)
    def on_not_found(request: Request, exc: RecordNotFound):
        return _error(request, 404, str(exc))

    @app.exception_handler(StoreError)
    def on_store_error(request: Request, exc: StoreError):
        logger.error("Store error on %s: %s", request.url.path, exc)
        return _error(request, 502, translate_store_error(str(exc)))

    return app


app = create_app()
