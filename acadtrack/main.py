import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from acadtrack.core.config import settings
from acadtrack.core.exceptions import ServiceError, StoreError
from acadtrack.api.v1.batches.router import router as batches_router
from acadtrack.api.v1.classes.router import router as classes_router
from acadtrack.api.v1.defaulters.router import router as defaulters_router
from acadtrack.api.v1.departments.router import router as departments_router
from acadtrack.api.v1.electives.router import router as electives_router
from acadtrack.api.v1.enrollments.router import router as enrollments_router
from acadtrack.api.v1.offered_subjects.router import router as offered_subjects_router
from acadtrack.api.v1.statistics.router import router as statistics_router
from acadtrack.api.v1.staff.router import router as staff_router
from acadtrack.api.v1.students.router import router as students_router
from acadtrack.api.v1.subjects.router import router as subjects_router
from acadtrack.api.v1.submissions.router import router as submissions_router

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    # Routers pass ServiceError payloads through as the detail; anything else is wrapped
    if isinstance(exc.detail, dict) and "success" in exc.detail:
        content = exc.detail
    else:
        content = {"success": False, "error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Data store error on %s %s", request.method, request.url.path)
    err = StoreError()
    return JSONResponse(status_code=err.status_code, content=err.to_payload())


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Academic Submission Tracking")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)

    # Routers
    app.include_router(departments_router)
    app.include_router(classes_router)
    app.include_router(staff_router)
    app.include_router(batches_router)
    app.include_router(students_router)
    app.include_router(subjects_router)
    app.include_router(offered_subjects_router)
    app.include_router(electives_router)
    app.include_router(enrollments_router)
    app.include_router(submissions_router)
    app.include_router(statistics_router)
    app.include_router(defaulters_router)

    return app


app = create_app()
