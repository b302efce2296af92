"""
Forms API: public submission endpoint plus the tenant dashboard routes.

Run with ``uvicorn main:app`` or ``python main.py``.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from db.database import dispose_engine, init_db, init_engine
from routers.client_info import router as client_info_router
from routers.forms import router as forms_router
from routers.health import router as health_router
from routers.submissions import router as submissions_router
from utils.limiter import RateLimiter, create_submission_limiter, limiter
from utils.logger import RequestContextLogMiddleware, setup_logging
from utils.settings import Settings, get_settings

logger = logging.getLogger("forms")


def _safe_message(status_code: int) -> str:
    mapping = {
        400: "Invalid request.",
        401: "Unauthorized.",
        403: "Action not allowed.",
        404: "Not found.",
        405: "Method not allowed.",
        409: "Conflict.",
        413: "Request too large.",
        415: "Unsupported request.",
        422: "Invalid request.",
        429: "Too many requests.",
        500: "Something went wrong. Please try again.",
        503: "Service unavailable. Please try again.",
    }
    return mapping.get(int(status_code or 500), "Something went wrong. Please try again.")


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    # Production-safe error bodies; the submission routes build their own responses

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        if settings.is_production or not exc.detail:
            message = _safe_message(exc.status_code)
        else:
            message = str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=422, content={"error": _safe_message(422)})

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(status_code=429, content={"error": "Rate limit exceeded"})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": _safe_message(500)})


def create_app(settings: Optional[Settings] = None, submission_limiter: Optional[RateLimiter] = None) -> FastAPI:
    """Build the application; tests pass their own settings and limiter."""
    settings = settings or get_settings()
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_engine(settings.DATABASE_URL)
        await init_db()
        logger.info("%s started env=%s", settings.APP_NAME, settings.ENV)
        try:
            yield
        finally:
            await dispose_engine()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.limiter = limiter
    app.state.submission_limiter = submission_limiter or create_submission_limiter(settings)

    _register_exception_handlers(app, settings)

    app.add_middleware(SlowAPIMiddleware)
    # Forms are embedded on arbitrary customer sites
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextLogMiddleware)

    app.include_router(submissions_router)
    app.include_router(forms_router)
    app.include_router(client_info_router)
    app.include_router(health_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
