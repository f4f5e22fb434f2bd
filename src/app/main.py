import logging
import threading
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from agents.orchestrator import Orchestrator
from agents.registry.agent import RegistryReconciler
from app.api.middleware.request_log import RequestLogMiddleware
from app.api.v1.routes_cleanup import router as cleanup_router
from app.api.v1.routes_pipeline import router as pipeline_router
from app.api.v1.routes_signals import router as signals_router
from core.config import get_settings
from core.logger import setup_logging
from data.storage.db import init_db, SessionLocal
from data.storage.repositories.signals_repo import SignalNotFoundError


setup_logging()
app = FastAPI(title="Signal Queue Pipeline")
logger = logging.getLogger(__name__)


@app.on_event("startup")
def on_startup() -> None:
    init_db()
    settings = get_settings()
    if settings.enable_scheduler:
        thread = threading.Thread(
            target=_scheduler_loop,
            args=(settings.scheduler_interval_hours,),
            daemon=True,
        )
        thread.start()


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse({"error": message}, status_code=400)


@app.exception_handler(SignalNotFoundError)
async def not_found_handler(request: Request, exc: SignalNotFoundError) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=404)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse({"error": str(exc)}, status_code=500)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


app.add_middleware(RequestLogMiddleware)
app.include_router(signals_router, tags=["signals"])
app.include_router(cleanup_router, tags=["cleanup"])
app.include_router(pipeline_router, tags=["pipeline"])


def _scheduler_loop(interval_hours: int) -> None:
    sleep_seconds = max(1, int(interval_hours * 3600))
    while True:
        try:
            with SessionLocal() as session:
                RegistryReconciler(session).reconcile()
                Orchestrator(session).run()
                logger.info("Scheduled maintenance run completed")
        except Exception as exc:
            logger.exception("Scheduled maintenance run failed: %s", exc)
        time.sleep(sleep_seconds)
