"""Shared fixtures: in-memory stores, wired services and an app client."""

import os


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_REQUESTS", "false")

from collections.abc import Callable  # noqa: E402
from decimal import Decimal  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from src.access.service import AccessService  # noqa: E402
from src.auth.permissions import UserRole  # noqa: E402
from src.auth.schemas import Identity  # noqa: E402
from src.auth.security import create_access_token  # noqa: E402
from src.courses.models import Course  # noqa: E402
from src.curriculum.service import CurriculumService  # noqa: E402
from src.enrollments.service import EnrollmentService  # noqa: E402
from src.main import create_app, wire_services  # noqa: E402
from src.progress.service import CompletionService, ProgressAggregator  # noqa: E402
from tests.fakes import (  # noqa: E402
    FakeCompletionStore,
    FakeCourseStore,
    FakeCurriculumStore,
    FakeEnrollmentStore,
)


# ==============================================================================
# Identities
# ==============================================================================


@pytest.fixture
def admin() -> Identity:
    return Identity(id=uuid4(), role=UserRole.SUPER_ADMIN)


@pytest.fixture
def trainer() -> Identity:
    """Trainer who owns the course fixtures."""
    return Identity(id=uuid4(), role=UserRole.TRAINER)


@pytest.fixture
def other_trainer() -> Identity:
    return Identity(id=uuid4(), role=UserRole.TRAINER)


@pytest.fixture
def trainee() -> Identity:
    return Identity(id=uuid4(), role=UserRole.TRAINEE)


# ==============================================================================
# Stores
# ==============================================================================


@pytest.fixture
def course_store() -> FakeCourseStore:
    return FakeCourseStore()


@pytest.fixture
def enrollment_store() -> FakeEnrollmentStore:
    return FakeEnrollmentStore()


@pytest.fixture
def curriculum_store() -> FakeCurriculumStore:
    return FakeCurriculumStore()


@pytest.fixture
def completion_store() -> FakeCompletionStore:
    return FakeCompletionStore()


@pytest.fixture
def paid_course(course_store: FakeCourseStore, trainer: Identity) -> Course:
    """Published paid course owned by ``trainer``."""
    return course_store.add(
        Course(
            title="Pharmacology Basics",
            price=Decimal("49.90"),
            trainer_id=trainer.id,
            is_published=True,
        )
    )


@pytest.fixture
def free_course(course_store: FakeCourseStore, trainer: Identity) -> Course:
    """Published free course owned by ``trainer``."""
    return course_store.add(
        Course(title="Welcome Tour", trainer_id=trainer.id, is_published=True)
    )


# ==============================================================================
# Services
# ==============================================================================


@pytest.fixture
def enrollment_service(
    enrollment_store: FakeEnrollmentStore, course_store: FakeCourseStore
) -> EnrollmentService:
    return EnrollmentService(enrollment_store, course_store)


@pytest.fixture
def access_service(
    course_store: FakeCourseStore, enrollment_store: FakeEnrollmentStore
) -> AccessService:
    return AccessService(course_store, enrollment_store)


@pytest.fixture
def curriculum_service(
    curriculum_store: FakeCurriculumStore, course_store: FakeCourseStore
) -> CurriculumService:
    return CurriculumService(curriculum_store, course_store)


@pytest.fixture
def progress_aggregator(
    curriculum_service: CurriculumService, completion_store: FakeCompletionStore
) -> ProgressAggregator:
    return ProgressAggregator(curriculum_service, completion_store)


@pytest.fixture
def completion_service(
    completion_store: FakeCompletionStore,
    curriculum_service: CurriculumService,
    enrollment_store: FakeEnrollmentStore,
) -> CompletionService:
    return CompletionService(completion_store, curriculum_service, enrollment_store)


# ==============================================================================
# Application
# ==============================================================================


@pytest.fixture
def app(
    course_store: FakeCourseStore,
    enrollment_store: FakeEnrollmentStore,
    curriculum_store: FakeCurriculumStore,
    completion_store: FakeCompletionStore,
) -> FastAPI:
    """Application wired to the in-memory stores (lifespan is not run)."""
    application = create_app()
    wire_services(
        application.state,
        courses=course_store,
        enrollments=enrollment_store,
        curriculum=curriculum_store,
        completions=completion_store,
    )
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers() -> Callable[[Identity], dict[str, str]]:
    """Build a Bearer header for an identity."""

    def _headers(identity: Identity) -> dict[str, str]:
        token = create_access_token(
            {"sub": str(identity.id), "role": identity.role.value}
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
