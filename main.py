# main.py
import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from hvacdesk.api.endpoints import catalog, invoices, jobs, reports
from hvacdesk.core.config import settings
from hvacdesk.core.observability import RequestLoggingMiddleware, configure_logging
from hvacdesk.services.exceptions import ServiceError, create_error_response
# Import all models to ensure relationships are properly resolved
from hvacdesk.db import base  # noqa: F401

configure_logging()
logger = logging.getLogger("hvacdesk")

app = FastAPI(title="HVAC service desk")
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
	if exc.correlation_id is None:
		exc.correlation_id = getattr(request.state, "correlation_id", None)
	log = logger.error if exc.http_status >= 500 else logger.info
	log(
		"Request failed: %s",
		exc,
		extra={"correlation_id": exc.correlation_id, "error_code": exc.error_code, "details": exc.details},
	)
	return JSONResponse(status_code=exc.http_status.value, content=create_error_response(exc))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
	correlation_id = getattr(request.state, "correlation_id", None)
	logger.exception("Unhandled error", extra={"correlation_id": correlation_id})
	return JSONResponse(
		status_code=500,
		content={
			"error_code": "INTERNAL_ERROR",
			"message": "A system error occurred. Please try again later.",
			"correlation_id": correlation_id,
		},
	)


app.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
app.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
app.include_router(reports.router, prefix="/reports", tags=["reports"])
app.include_router(catalog.router, prefix="/services", tags=["catalog"])

if settings.STORAGE_BACKEND.lower() == "local" and settings.PUBLIC_UPLOADS_URL.startswith("/"):
	Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
	app.mount(settings.PUBLIC_UPLOADS_URL, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")
