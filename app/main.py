# Main application file

import logging
import time

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.rate_limiter import limiter
from app.core.config import settings
from app.database import get_db
from app.routers import auth, customers, products, reports, users
from app.services.errors import ReportError


# LOGGING CONFIGURATION

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

logger = logging.getLogger("app")
http_logger = logging.getLogger("app.http")


# APP INIT

app = FastAPI(
    title="Customer Sales CRM API",
    description="Customers, products, point-in-time price history and PDF sales reports",
    version="1.0.0",
    debug=settings.DEBUG,
)


# CORS (token-based auth; the PDF filename must be readable by the browser)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
    expose_headers=["Content-Disposition"],
)


# RATE LIMITING

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# SALES DATA FAILURES OUTSIDE THE REPORT ROUTES

@app.exception_handler(ReportError)
async def report_error_handler(request: Request, exc: ReportError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Failed to load sales data"},
    )


# REQUEST LOGGING MIDDLEWARE

@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000

    http_logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"in {elapsed_ms:.1f}ms"
    )
    return response


# ROUTERS

for module in (auth, users, customers, products, reports):
    app.include_router(module.router)


# ROOT / HEALTH

@app.get("/")
def root():
    return {"message": f"{app.title} is running", "env": settings.ENV}


@app.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error(f"Health check could not reach the database: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "database": "unreachable"},
        )

    return {"status": "ok", "database": "reachable"}
