from unittest import mock

import pytest
from django.db import IntegrityError, transaction
from rest_framework.exceptions import PermissionDenied, ValidationError

from apps.common.exceptions import Conflict, InvalidTransition
from apps.missions import services
from apps.missions.models import Application, Mission


pytestmark = pytest.mark.django_db


def test_apply_accept_then_duplicate_is_conflict(client_for, student, customer, mission):
    student_client = client_for(student)

    created = student_client.post("/api/applications/", {
        "mission_id": mission.id,
        "cover_letter": "I have built three bakery sites.",
    }, format="json")
    assert created.status_code == 201
    application_id = created.json()["data"]["id"]
    assert created.json()["data"]["status"] == "pending"

    accepted = client_for(customer).put(f"/api/applications/{application_id}/accept/")
    assert accepted.status_code == 200
    assert accepted.json()["data"]["status"] == "accepted"
    assert accepted.json()["data"]["mission"]["status"] == "in_discussion"

    mission.refresh_from_db()
    assert mission.status == Mission.Status.IN_DISCUSSION

    duplicate = student_client.post("/api/applications/", {"mission_id": mission.id}, format="json")
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "conflict"
    assert Application.objects.filter(mission=mission, student=student).count() == 1


def test_duplicate_application_raises_conflict(student, mission):
    services.create_application(mission.id, student, "first")

    with pytest.raises(Conflict):
        services.create_application(mission.id, student, "second")


def test_insert_race_maps_to_conflict(student, mission):
    # Another request inserts the row after this one's lookup came back empty
    Application.objects.create(mission=mission, student=student, cover_letter="racer")

    with mock.patch("apps.missions.services._has_applied", return_value=False):
        with pytest.raises(Conflict):
            services.create_application(mission.id, student, "late")

    assert Application.objects.filter(mission=mission, student=student).count() == 1
    assert Application.objects.get(mission=mission, student=student).cover_letter == "racer"


def test_database_rejects_duplicate_pair(student, mission):
    Application.objects.create(mission=mission, student=student)

    with pytest.raises(IntegrityError), transaction.atomic():
        Application.objects.create(mission=mission, student=student)


def test_customer_cannot_apply(customer, mission):
    with pytest.raises(PermissionDenied):
        services.create_application(mission.id, customer)


def test_cannot_apply_to_closed_mission(student, mission):
    mission.status = Mission.Status.IN_PROGRESS
    mission.save()

    with pytest.raises(ValidationError):
        services.create_application(mission.id, student)


def test_apply_via_api_requires_student(client_for, customer, mission):
    response = client_for(customer).post("/api/applications/", {"mission_id": mission.id}, format="json")

    assert response.status_code == 403
    assert response.json()["message"] == "Only students can perform this action"


def test_only_owner_can_accept(client_for, student, other_customer, mission):
    application = services.create_application(mission.id, student)

    response = client_for(other_customer).put(f"/api/applications/{application.id}/accept/")

    assert response.status_code == 403
    application.refresh_from_db()
    assert application.status == Application.Status.PENDING
    mission.refresh_from_db()
    assert mission.status == Mission.Status.OPEN


def test_reject_records_reason(client_for, student, customer, mission):
    application = services.create_application(mission.id, student)

    response = client_for(customer).put(
        f"/api/applications/{application.id}/reject/",
        {"rejection_reason": " Looking for more experience "},
        format="json",
    )

    assert response.status_code == 200
    application.refresh_from_db()
    assert application.status == Application.Status.REJECTED
    assert application.rejection_reason == "Looking for more experience"
    assert application.rejected_at is not None
    mission.refresh_from_db()
    assert mission.status == Mission.Status.OPEN


def test_decided_application_cannot_be_decided_again(student, customer, mission):
    application = services.create_application(mission.id, student)
    services.decide_application(application.id, customer, Application.Status.REJECTED)

    with pytest.raises(InvalidTransition):
        services.decide_application(application.id, customer, Application.Status.ACCEPTED)


def test_accept_on_terminal_mission_is_invalid(student, customer, mission):
    application = services.create_application(mission.id, student)
    mission.status = Mission.Status.CANCELLED
    mission.save()

    with pytest.raises(InvalidTransition):
        services.decide_application(application.id, customer, Application.Status.ACCEPTED)

    application.refresh_from_db()
    assert application.status == Application.Status.PENDING


def test_accept_pulls_in_progress_mission_back_to_discussion(student, customer, mission):
    application = services.create_application(mission.id, student)
    mission.status = Mission.Status.IN_PROGRESS
    mission.save()

    services.decide_application(application.id, customer, Application.Status.ACCEPTED)

    mission.refresh_from_db()
    assert mission.status == Mission.Status.IN_DISCUSSION


def test_update_endpoint_decides_with_status(client_for, student, customer, mission):
    application = services.create_application(mission.id, student)

    response = client_for(customer).patch(
        f"/api/applications/{application.id}/", {"status": "accepted"}, format="json"
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "accepted"


def test_only_applicant_edits_cover_letter(client_for, student, customer, mission):
    application = services.create_application(mission.id, student, "draft")

    owner = client_for(customer).patch(
        f"/api/applications/{application.id}/", {"cover_letter": "edited"}, format="json"
    )
    assert owner.status_code == 403

    applicant = client_for(student).patch(
        f"/api/applications/{application.id}/", {"cover_letter": "final"}, format="json"
    )
    assert applicant.status_code == 200
    assert applicant.json()["data"]["cover_letter"] == "final"


def test_listing_is_scoped_by_role(client_for, student, other_student, customer, other_customer, mission):
    mine = services.create_application(mission.id, student)
    services.create_application(mission.id, other_student)

    student_view = client_for(student).get("/api/applications/").json()
    assert [row["id"] for row in student_view["data"]] == [mine.id]

    owner_view = client_for(customer).get("/api/applications/").json()
    assert owner_view["count"] == 2

    stranger_view = client_for(other_customer).get("/api/applications/").json()
    assert stranger_view["count"] == 0


def test_mission_applications_hide_others_from_students(client_for, student, other_student, customer, mission):
    services.create_application(mission.id, student)
    services.create_application(mission.id, other_student)

    as_owner = client_for(customer).get(f"/api/missions/{mission.id}/applications/").json()
    as_student = client_for(student).get(f"/api/missions/{mission.id}/applications/").json()

    assert as_owner["count"] == 2
    assert as_student["count"] == 1
    assert as_student["data"][0]["student"]["id"] == student.id


def test_outsider_cannot_read_application(client_for, student, other_student, mission):
    application = services.create_application(mission.id, student)

    response = client_for(other_student).get(f"/api/applications/{application.id}/")

    assert response.status_code == 403
