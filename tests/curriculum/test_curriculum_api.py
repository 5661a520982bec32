"""Tests for curriculum endpoints."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from src.courses.models import Course
from src.curriculum.models import ContentItem, Section
from src.enrollments.models import Enrollment, EnrollmentStatus, PaymentStatus


@pytest.fixture
def published_tree(curriculum_store, paid_course):
    """One published section with a published and a draft item."""
    section = Section(course_id=paid_course.id, title="Basics", is_published=True)
    curriculum_store.sections[section.id] = section
    live = ContentItem(
        section_id=section.id,
        course_id=paid_course.id,
        title="Welcome",
        order=0,
        is_published=True,
    )
    draft = ContentItem(
        section_id=section.id, course_id=paid_course.id, title="WIP", order=1
    )
    curriculum_store.contents[live.id] = live
    curriculum_store.contents[draft.id] = draft
    return section, live, draft


class TestAuthoring:
    def test_owner_builds_curriculum(
        self, client: TestClient, auth_headers, trainer, paid_course
    ) -> None:
        headers = auth_headers(trainer)

        section = client.post(
            f"/v1/courses/{paid_course.id}/sections",
            json={"title": "Intro", "is_published": True},
            headers=headers,
        )
        assert section.status_code == 201
        section_id = section.json()["id"]

        content = client.post(
            f"/v1/courses/{paid_course.id}/sections/{section_id}/contents",
            json={"title": "Video 1", "content_type": "video"},
            headers=headers,
        )
        assert content.status_code == 201
        assert content.json()["order"] == 0

        tree = client.get(f"/v1/courses/{paid_course.id}/sections", headers=headers)
        assert tree.status_code == 200
        sections = tree.json()["sections"]
        assert sections[0]["title"] == "Intro"
        # Authors also see unpublished items
        assert sections[0]["contents"][0]["title"] == "Video 1"

    def test_other_trainer_cannot_edit(
        self, client: TestClient, auth_headers, other_trainer, paid_course
    ) -> None:
        response = client.post(
            f"/v1/courses/{paid_course.id}/sections",
            json={"title": "Hijack"},
            headers=auth_headers(other_trainer),
        )
        assert response.status_code == 403
        assert response.json()["code"] == "not_allowed"

    def test_any_trainer_edits_unassigned_course(
        self, client: TestClient, auth_headers, course_store, other_trainer
    ) -> None:
        course = course_store.add(Course(title="Unassigned", price=Decimal(0)))
        response = client.post(
            f"/v1/courses/{course.id}/sections",
            json={"title": "First"},
            headers=auth_headers(other_trainer),
        )
        assert response.status_code == 201

    def test_reorder_and_delete(
        self, client: TestClient, auth_headers, trainer, paid_course
    ) -> None:
        headers = auth_headers(trainer)
        ids = [
            client.post(
                f"/v1/courses/{paid_course.id}/sections",
                json={"title": title},
                headers=headers,
            ).json()["id"]
            for title in ("A", "B", "C")
        ]

        moved = client.put(
            f"/v1/sections/{ids[2]}/order", json={"order": 0}, headers=headers
        )
        deleted = client.delete(f"/v1/sections/{ids[0]}", headers=headers)
        tree = client.get(f"/v1/courses/{paid_course.id}/sections", headers=headers)

        assert moved.json()["order"] == 0
        assert deleted.status_code == 204
        assert [(s["title"], s["order"]) for s in tree.json()["sections"]] == [
            ("C", 0),
            ("B", 2),
        ]
    def test_update_null_clears_description(
        self, client: TestClient, auth_headers, trainer, paid_course
    ) -> None:
        headers = auth_headers(trainer)
        created = client.post(
            f"/v1/courses/{paid_course.id}/sections",
            json={"title": "Intro", "description": "Start here", "is_published": True},
            headers=headers,
        ).json()

        response = client.put(
            f"/v1/sections/{created['id']}",
            json={"description": None},
            headers=headers,
        )

        body = response.json()
        assert response.status_code == 200
        assert body["description"] is None
        # Fields left out of the body keep their values
        assert body["title"] == "Intro"
        assert body["is_published"] is True

    def test_negative_order_is_422(
        self, client: TestClient, auth_headers, trainer, paid_course
    ) -> None:
        response = client.post(
            f"/v1/courses/{paid_course.id}/sections",
            json={"title": "A", "order": -1},
            headers=auth_headers(trainer),
        )
        assert response.status_code == 422

    def test_delete_non_empty_section_is_400(
        self, client: TestClient, auth_headers, trainer, published_tree
    ) -> None:
        section, _, _ = published_tree
        response = client.delete(
            f"/v1/sections/{section.id}", headers=auth_headers(trainer)
        )
        assert response.status_code == 400
        assert response.json()["code"] == "has_children"


class TestLearnerView:
    def test_trainee_sees_published_only(
        self, client: TestClient, auth_headers, trainee, paid_course, published_tree
    ) -> None:
        """Loose tier: no enrollment needed to browse the outline."""
        response = client.get(
            f"/v1/courses/{paid_course.id}/sections", headers=auth_headers(trainee)
        )

        assert response.status_code == 200
        contents = response.json()["sections"][0]["contents"]
        assert [c["title"] for c in contents] == ["Welcome"]

    def test_content_requires_paid_enrollment(
        self, client: TestClient, auth_headers, trainee, paid_course, published_tree
    ) -> None:
        _, live, _ = published_tree
        response = client.get(
            f"/v1/contents/{live.id}", headers=auth_headers(trainee)
        )

        assert response.status_code == 403
        body = response.json()
        assert body["code"] == "no_enrollment"
        assert body["reason"] == "no_enrollment"
        assert body["requiresEnrollment"] is True
        assert body["coursePrice"] == 49.9

    def test_pending_payment_denied_with_details(
        self,
        client: TestClient,
        auth_headers,
        enrollment_store,
        trainee,
        paid_course,
        published_tree,
    ) -> None:
        _, live, _ = published_tree
        enrollment = enrollment_store.add(
            Enrollment(user_id=trainee.id, course_id=paid_course.id)
        )

        response = client.get(
            f"/v1/contents/{live.id}", headers=auth_headers(trainee)
        )

        body = response.json()
        assert response.status_code == 403
        assert body["code"] == "payment_required"
        assert body["paymentStatus"] == "pending"
        assert body["enrollmentId"] == str(enrollment.id)

    def test_paid_learner_reads_content_but_not_drafts(
        self,
        client: TestClient,
        auth_headers,
        enrollment_store,
        trainee,
        paid_course,
        published_tree,
    ) -> None:
        _, live, draft = published_tree
        enrollment_store.add(
            Enrollment(
                user_id=trainee.id,
                course_id=paid_course.id,
                status=EnrollmentStatus.ACTIVE,
                payment_status=PaymentStatus.PAID,
            )
        )
        headers = auth_headers(trainee)

        live_response = client.get(f"/v1/contents/{live.id}", headers=headers)
        draft_response = client.get(f"/v1/contents/{draft.id}", headers=headers)

        assert live_response.status_code == 200
        assert draft_response.status_code == 404
