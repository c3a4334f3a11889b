import logging
import time
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, configure_logging
from contact_service import ContactService, request_meta
from database import MongoStore, connect
from notifications import SmtpNotifier
from schemas import ContactSubmission, FieldError, ValidationFailed

logger = logging.getLogger(__name__)


def _field_errors(exc: RequestValidationError) -> list:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        errors.append(FieldError(field=".".join(loc) or "body", message=err.get("msg", "Invalid value")))
    return errors


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[MongoStore] = None,
    notifier: Optional[SmtpNotifier] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    if store is None:
        store = MongoStore(connect(settings))
    if notifier is None:
        notifier = SmtpNotifier(settings)
    service = ContactService(store, notifier, settings)

    app = FastAPI(title="Portfolio Backend")
    app.state.settings = settings
    app.state.contact_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.allowed_origin],
        allow_credentials=settings.allowed_origin != "*",
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
    )

    if not settings.is_production:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info("%s %s %d %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
            return response

    @app.exception_handler(RequestValidationError)
    async def malformed_body(request: Request, exc: RequestValidationError):
        body = ValidationFailed(errors=_field_errors(exc))
        return JSONResponse(status_code=400, content=body.model_dump(mode="json"))

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            message = f"Not Found - {request.url.path}"
        else:
            message = str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"message": message})

    @app.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content: Dict[str, Any] = {"message": "Internal Server Error"}
        if not settings.is_production:
            content["error"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    @app.get("/")
    def read_root():
        return {"message": "Portfolio API is running"}

    @app.get("/test")
    def test_database():
        """Test endpoint to check if database is available and accessible"""
        response: Dict[str, Any] = {
            "backend": "✅ Running",
            "database_url": "✅ Set" if settings.database_url else "❌ Not Set",
        }
        response.update(store.status())
        return response

    @app.post("/api/contact")
    def submit_contact(submission: ContactSubmission, request: Request):
        """Validate and store a contact message, then email a notification."""
        outcome = service.submit(
            submission.name,
            submission.email,
            submission.message,
            request_meta(request.headers),
        )
        return JSONResponse(status_code=outcome.status_code, content=outcome.body())

    return app


def build_app() -> FastAPI:
    """Read the environment, configure logging and build the app.

    Serve with `uvicorn main:build_app --factory`.
    """
    settings = Settings.from_env()
    configure_logging(settings)
    return create_app(settings)


if __name__ == "__main__":
    import uvicorn

    app = build_app()
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
