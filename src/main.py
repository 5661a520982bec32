"""Course Enrollment & Progress API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.access.router import router as access_router
from src.access.service import AccessService
from src.config import get_settings
from src.core.context import get_request_id
from src.core.database import init_cassandra, shutdown_cassandra
from src.core.errors import DomainError, status_code_for
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware
from src.courses.store import CassandraCourseStore, CourseStore
from src.curriculum.router import (
    router_contents,
    router_course_sections,
    router_sections,
)
from src.curriculum.service import CurriculumService
from src.curriculum.store import CassandraCurriculumStore, CurriculumStore
from src.enrollments.router import router as enrollments_router
from src.enrollments.service import EnrollmentService
from src.enrollments.store import CassandraEnrollmentStore, EnrollmentStore
from src.health import router as health_router
from src.progress.router import router as progress_router
from src.progress.service import CompletionService, ProgressAggregator
from src.progress.store import CassandraCompletionStore, CompletionStore


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


def wire_services(
    state: Any,
    courses: CourseStore,
    enrollments: EnrollmentStore,
    curriculum: CurriculumStore,
    completions: CompletionStore,
) -> None:
    """Build services from repositories and attach them to ``app.state``."""
    curriculum_service = CurriculumService(curriculum, courses)

    state.enrollment_service = EnrollmentService(enrollments, courses)
    state.access_service = AccessService(courses, enrollments)
    state.curriculum_service = curriculum_service
    state.progress_aggregator = ProgressAggregator(
        curriculum_service,
        completions,
        recent_activity_limit=get_settings().progress_recent_activity_limit,
    )
    state.completion_service = CompletionService(
        completions, curriculum_service, enrollments
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        session = await init_cassandra()
        keyspace = settings.cassandra_keyspace
        wire_services(
            app.state,
            courses=CassandraCourseStore(session, keyspace),
            enrollments=CassandraEnrollmentStore(session, keyspace),
            curriculum=CassandraCurriculumStore(session, keyspace),
            completions=CassandraCompletionStore(session, keyspace),
        )
        logger.info("services_initialized")
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    logger.info("shutting_down_application")
    await shutdown_cassandra()


def _error_body(request: Request, status_code: int, message: str, **extra: Any) -> dict:
    request_id = getattr(request.state, "request_id", None) or get_request_id()
    return {
        "error": True,
        "message": message,
        "status_code": status_code,
        "request_id": request_id,
        **extra,
    }


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # debug stays False so Starlette never renders stack traces
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Course enrollment, access control and progress API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    @app.exception_handler(DomainError)
    async def domain_exception_handler(
        request: Request, exc: DomainError
    ) -> ORJSONResponse:
        """Map the domain error taxonomy to HTTP responses."""
        status_code = status_code_for(exc)

        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "domain_server_error",
                code=exc.code,
                path=request.url.path,
                method=request.method,
                exc_info=exc,
            )
            return ORJSONResponse(
                status_code=status_code,
                content=_error_body(
                    request, status_code, "Internal server error", code="server_error"
                ),
            )

        logger.warning(
            "domain_error",
            code=exc.code,
            status_code=status_code,
            path=request.url.path,
            method=request.method,
        )
        return ORJSONResponse(
            status_code=status_code,
            content=_error_body(
                request, status_code, exc.message, code=exc.code, **exc.details
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )
        message = (
            str(exc.detail)
            if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
            else "Internal server error"
        )
        return ORJSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.status_code, message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle request validation errors (safe to expose)."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )
        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(
                request,
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                "Validation error",
                code="validation_error",
                details=[
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
            ),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all: log everything, return nothing internal."""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "An unexpected error occurred. Please try again later.",
            ),
        )

    app.include_router(health_router)
    app.include_router(access_router)
    app.include_router(enrollments_router)
    app.include_router(router_course_sections)
    app.include_router(router_sections)
    app.include_router(router_contents)
    app.include_router(progress_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": f"{settings.app_name} API",
            "version": settings.app_version,
        }

    return app


app = create_app()
