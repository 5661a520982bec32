"""Tests for progress endpoints."""

import pytest
from fastapi.testclient import TestClient

from src.curriculum.models import ContentItem, Section
from src.enrollments.models import Enrollment, EnrollmentStatus, PaymentStatus


@pytest.fixture
def lesson(curriculum_store, paid_course) -> ContentItem:
    section = Section(course_id=paid_course.id, title="Basics", is_published=True)
    curriculum_store.sections[section.id] = section
    item = ContentItem(
        section_id=section.id,
        course_id=paid_course.id,
        title="Welcome",
        is_published=True,
    )
    curriculum_store.contents[item.id] = item
    return item


@pytest.fixture
def paid_enrollment(enrollment_store, trainee, paid_course) -> Enrollment:
    return enrollment_store.add(
        Enrollment(
            user_id=trainee.id,
            course_id=paid_course.id,
            status=EnrollmentStatus.ACTIVE,
            payment_status=PaymentStatus.PAID,
        )
    )


def _url(course, item) -> str:
    return f"/v1/progress/courses/{course.id}/contents/{item.id}"


class TestRecord:
    @pytest.mark.usefixtures("paid_enrollment")
    def test_record_and_read_back(
        self, client: TestClient, auth_headers, trainee, paid_course, lesson
    ) -> None:
        headers = auth_headers(trainee)

        recorded = client.post(
            _url(paid_course, lesson),
            json={"is_completed": True, "time_spent": 90},
            headers=headers,
        )
        fetched = client.get(_url(paid_course, lesson), headers=headers)

        assert recorded.status_code == 200
        assert recorded.json()["is_completed"] is True
        assert recorded.json()["completed_at"] is not None
        assert fetched.status_code == 200
        assert fetched.json()["time_spent"] == 90

    def test_record_without_enrollment_is_403(
        self, client: TestClient, auth_headers, trainee, paid_course, lesson
    ) -> None:
        response = client.post(
            _url(paid_course, lesson),
            json={"is_completed": True},
            headers=auth_headers(trainee),
        )
        assert response.status_code == 403
        assert response.json()["code"] == "not_enrolled"

    @pytest.mark.usefixtures("paid_enrollment")
    def test_negative_time_is_422(
        self, client: TestClient, auth_headers, trainee, paid_course, lesson
    ) -> None:
        response = client.post(
            _url(paid_course, lesson),
            json={"time_spent": -5},
            headers=auth_headers(trainee),
        )
        assert response.status_code == 422

    def test_requires_authentication(
        self, client: TestClient, paid_course, lesson
    ) -> None:
        response = client.post(_url(paid_course, lesson), json={})
        assert response.status_code == 401


class TestContentProgress:
    def test_not_enrolled_is_denied(
        self, client: TestClient, auth_headers, trainee, paid_course, lesson
    ) -> None:
        response = client.get(
            _url(paid_course, lesson), headers=auth_headers(trainee)
        )
        assert response.status_code == 403
        assert response.json()["reason"] == "no_enrollment"

    @pytest.mark.usefixtures("paid_enrollment")
    def test_untouched_item_reads_as_zero(
        self, client: TestClient, auth_headers, trainee, paid_course, lesson
    ) -> None:
        response = client.get(
            _url(paid_course, lesson), headers=auth_headers(trainee)
        )
        body = response.json()
        assert response.status_code == 200
        assert body["is_completed"] is False
        assert body["progress"] == 0


class TestCourseProgress:
    def test_my_progress_without_enrollment(
        self, client: TestClient, auth_headers, trainee, paid_course, lesson
    ) -> None:
        """Loose tier: the outline and a zero report are visible."""
        response = client.get(
            f"/v1/progress/courses/{paid_course.id}", headers=auth_headers(trainee)
        )

        body = response.json()
        assert response.status_code == 200
        assert body["overall_progress"] == 0
        assert body["total_items"] == 1
        assert body["sections"][0]["items"][0]["status"] == "not_started"

    @pytest.mark.usefixtures("paid_enrollment")
    def test_my_progress_after_completion(
        self, client: TestClient, auth_headers, trainee, paid_course, lesson
    ) -> None:
        headers = auth_headers(trainee)
        client.post(
            _url(paid_course, lesson), json={"is_completed": True}, headers=headers
        )

        response = client.get(f"/v1/progress/courses/{paid_course.id}", headers=headers)

        body = response.json()
        assert body["overall_progress"] == 100
        assert body["recent_activity"][0]["content_id"] == str(lesson.id)

    @pytest.mark.usefixtures("paid_enrollment")
    def test_owner_reads_trainee_progress(
        self, client: TestClient, auth_headers, trainer, trainee, paid_course, lesson
    ) -> None:
        response = client.get(
            f"/v1/progress/courses/{paid_course.id}/trainees/{trainee.id}",
            headers=auth_headers(trainer),
        )
        assert response.status_code == 200
        assert response.json()["user_id"] == str(trainee.id)

    def test_trainee_without_enrollment_is_404(
        self, client: TestClient, auth_headers, trainer, trainee, paid_course, lesson
    ) -> None:
        response = client.get(
            f"/v1/progress/courses/{paid_course.id}/trainees/{trainee.id}",
            headers=auth_headers(trainer),
        )
        assert response.status_code == 404
        assert response.json()["code"] == "enrollment_not_found"

    @pytest.mark.usefixtures("paid_enrollment")
    def test_owner_and_trainee_see_same_percentage(
        self,
        client: TestClient,
        auth_headers,
        curriculum_store,
        trainer,
        trainee,
        paid_course,
        lesson,
    ) -> None:
        draft = ContentItem(
            section_id=lesson.section_id,
            course_id=paid_course.id,
            title="Draft",
            order=1,
        )
        curriculum_store.contents[draft.id] = draft
        client.post(
            _url(paid_course, lesson),
            json={"is_completed": True},
            headers=auth_headers(trainee),
        )

        own = client.get(
            f"/v1/progress/courses/{paid_course.id}", headers=auth_headers(trainee)
        )
        viewed = client.get(
            f"/v1/progress/courses/{paid_course.id}/trainees/{trainee.id}",
            headers=auth_headers(trainer),
        )

        assert own.json()["overall_progress"] == 100
        assert viewed.json()["overall_progress"] == 100
        assert viewed.json()["total_items"] == own.json()["total_items"] == 1

    def test_other_trainer_is_denied(
        self, client: TestClient, auth_headers, other_trainer, trainee, paid_course
    ) -> None:
        response = client.get(
            f"/v1/progress/courses/{paid_course.id}/trainees/{trainee.id}",
            headers=auth_headers(other_trainer),
        )
        assert response.status_code == 403

    def test_trainee_cannot_read_others(
        self, client: TestClient, auth_headers, trainee, paid_course
    ) -> None:
        response = client.get(
            f"/v1/progress/courses/{paid_course.id}/trainees/{trainee.id}",
            headers=auth_headers(trainee),
        )
        assert response.status_code == 403
