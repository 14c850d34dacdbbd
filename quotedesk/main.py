# quotedesk/main.py
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from quotedesk import models  # noqa: F401  (registers SQLAlchemy models)
from quotedesk.config import settings
from quotedesk.core.logging_config import logger, setup_logging
from quotedesk.core.request_id import RequestIdMiddleware
from quotedesk.db import Base, engine
from quotedesk.routers import quotations, reports

# ----------------------------------------------------
# App init
# ----------------------------------------------------
app = FastAPI(title="quotedesk", version="0.1.0")

setup_logging(settings.log_level)
logger.info("startup", service="quotedesk-api", env=settings.app_env)


# ----------------------------------------------------
# Health
# ----------------------------------------------------
@app.get("/health", include_in_schema=True)
def health() -> dict:
    return {"status": "ok"}


# ----------------------------------------------------
# Logging middleware
# ----------------------------------------------------
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    start = time.time()

    request_id = getattr(request.state, "request_id", None) or request.headers.get(
        "X-Request-ID", "unknown"
    )
    client_ip = request.client.host if request.client else "unknown"

    bound_logger = logger.bind(
        request_id=request_id,
        ip=client_ip,
        endpoint=str(request.url.path),
        method=request.method,
    )

    bound_logger.info("request_started")
    response = await call_next(request)
    latency_ms = round((time.time() - start) * 1000, 2)

    bound_logger.bind(status_code=response.status_code, latency_ms=latency_ms).info(
        "request_finished"
    )
    return response


# ----------------------------------------------------
# Middleware
# ----------------------------------------------------
app.add_middleware(RequestIdMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ----------------------------------------------------
# Routers
# ----------------------------------------------------
app.include_router(quotations.router)
app.include_router(reports.router)


# ----------------------------------------------------
# Startup
# ----------------------------------------------------
@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)
