# ─────────────────────────────────────────────────────────────────
# main.py — Application Entry Point
#
# Wires everything together:
#   - settings           (config.py)
#   - logging            (alerts.py)
#   - in-memory stores   (coordinator.py, database.py)
#   - routers            (routes/)
#
# Run locally:
#   uvicorn main:app --reload --port 3001
# or simply:
#   python main.py
# ─────────────────────────────────────────────────────────────────

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import alerts  # noqa: F401  (configures logging on import)
from config import Settings, settings as default_settings
from coordinator import AlarmCoordinator
from database import ConfigStore, LogStore
from routes import alarms, configs, logs

logger = logging.getLogger("http")

VERSION = "1.0.0"

ENDPOINTS = [
    "GET  /api/config/{device_id}",
    "PUT  /api/config/{device_id}",
    "GET  /api/alarm/{device_id}/status",
    "POST /api/alarm/{device_id}/trigger",
    "POST /api/alarm/{device_id}/stop",
    "POST /api/alarm/{device_id}/ack",
    "POST /api/logs",
    "GET  /api/logs/{device_id}",
    "GET  /api/logs",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 {app.state.settings.service_name} v{VERSION} starting")
    for endpoint in ENDPOINTS:
        logger.info(f"   {endpoint}")

    yield

    logger.info(
        f"🛑 Shutting down — {len(app.state.coordinator)} alarm state(s), "
        f"{len(app.state.log_store)} log entr(ies) discarded"
    )


# ─────────────────────────────────────────────────────────────────
# ERROR RESPONSES
# Every failure leaves the API as {"success": false, "error": "..."}
# ─────────────────────────────────────────────────────────────────

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = "Endpoint not found"
    else:
        message = str(exc.detail)

    logger.warning(f"❌ {request.method} {request.url.path} → {exc.status_code} — {message}")
    return _error(exc.status_code, message)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Pydantic rejected the request body or a path/query value.
    FastAPI answers 422 by default; the firmware expects 400.
    """

    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"] if part != "body")
    message = f"{field}: {first['msg']}" if field else first["msg"]

    logger.warning(f"❌ {request.method} {request.url.path} rejected — {message}")
    return _error(400, message)


# ─────────────────────────────────────────────────────────────────
# APP FACTORY
# ─────────────────────────────────────────────────────────────────

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build a fresh application with its own empty stores.

    The module-level `app` below is the one uvicorn serves; tests
    call create_app() to get an isolated instance each time.
    """

    app_settings = app_settings or default_settings

    app = FastAPI(
        title="Alarm Control API",
        description="Alarm handshake, config and event logs for polling alarm-clock devices",
        version=VERSION,
        lifespan=lifespan
    )

    app.state.settings = app_settings
    app.state.coordinator = AlarmCoordinator()
    app.state.config_store = ConfigStore(default_light_threshold=app_settings.default_light_threshold)
    app.state.log_store = LogStore()

    # The ESP32 and the React Native app both call us directly
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"{request.method} {request.url.path}")
        return await call_next(request)

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    @app.get("/health", tags=["Health"])
    def health():
        return {
            "status": "ok",
            "service": app_settings.service_name,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    app.include_router(alarms.router)
    app.include_router(configs.router)
    app.include_router(logs.router)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host=default_settings.host, port=default_settings.port)
