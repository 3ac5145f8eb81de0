from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from eventhub.api.errors import request_validation_handler
from eventhub.api.v1.router import router as v1_router
from eventhub.core.config import settings
from eventhub.core.logging import configure_logging
from eventhub.db import engine
from eventhub.middleware.rate_limit import RateLimitMiddleware
from eventhub.middleware.request_id import RequestIdMiddleware
from eventhub.middleware.security_headers import SecurityHeadersMiddleware
from eventhub.redis_client import redis_available

configure_logging()

app = FastAPI(title="Eventhub API")

app.add_exception_handler(RequestValidationError, request_validation_handler)

# The last middleware added runs first: request id and security headers wrap
# CORS preflights and rate-limit rejections, rate limiting sits next to the app.
app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIdMiddleware)

Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


@app.get("/")
def root():
    return {"name": "Eventhub API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/health/ready")
def ready():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        database = "unavailable"

    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "redis": "ok" if redis_available() else "unavailable",
    }


app.include_router(v1_router, prefix="/api")
