from decimal import Decimal

import pytest
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from apps.profiles import services
from apps.profiles.models import Profile, StudentProfile


pytestmark = pytest.mark.django_db


@pytest.fixture()
def listed_student(student):
    services.update_profile(student.id, student, {"bio": "Python and data viz", "location": "Lyon"})
    services.update_student_profile(student.id, student, {
        "skills": ["python", "pandas"],
        "categories": ["data"],
        "hourly_rate": Decimal("25"),
    })
    return student


def test_profile_is_created_on_first_read(api_client, customer):
    response = api_client.get(f"/api/profiles/{customer.id}/")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == customer.id
    assert data["bio"] == ""
    assert data["is_profile_complete"] is False
    assert Profile.objects.filter(user=customer).count() == 1


def test_unknown_user_profile_is_404(api_client):
    response = api_client.get("/api/profiles/987654/")

    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


def test_owner_updates_profile_and_name(client_for, customer):
    response = client_for(customer).put(f"/api/profiles/{customer.id}/", {
        "full_name": "Carla Mendes",
        "bio": " Runs a bakery ",
        "location": "Nantes",
    }, format="json")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["full_name"] == "Carla Mendes"
    assert data["bio"] == "Runs a bakery"
    assert data["is_profile_complete"] is True


def test_profile_needs_bio_and_location_to_be_complete(customer):
    profile = services.update_profile(customer.id, customer, {"bio": "Hello"})

    assert profile.is_profile_complete is False


def test_other_users_cannot_edit_profile(client_for, other_customer, customer, admin_user):
    denied = client_for(other_customer).put(f"/api/profiles/{customer.id}/", {"bio": "hijack"}, format="json")
    allowed = client_for(admin_user).put(f"/api/profiles/{customer.id}/", {"bio": "moderated"}, format="json")

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert Profile.objects.get(user=customer).bio == "moderated"


def test_student_profile_update_tracks_completion(student):
    partial = services.update_student_profile(student.id, student, {"skills": ["figma"]})
    assert partial.is_student_profile_complete is False

    complete = services.update_student_profile(student.id, student, {"categories": ["design"]})
    assert complete.is_student_profile_complete is True
    assert complete.skills == ["figma"]


def test_customer_has_no_student_profile(client_for, customer):
    response = client_for(customer).put(
        f"/api/profiles/{customer.id}/student/", {"skills": ["x"]}, format="json"
    )

    assert response.status_code == 403
    assert response.json()["message"] == "Only students can update student profile"
    assert not StudentProfile.objects.exists()


def test_student_profile_read_is_public(api_client, listed_student):
    response = api_client.get(f"/api/profiles/{listed_student.id}/student/")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["skills"] == ["python", "pandas"]
    assert data["hourly_rate"] == "25.00"
    assert data["availability_status"] == "available"


def test_missing_student_profile_is_404(student):
    with pytest.raises(NotFound):
        services.get_student_profile(student.id)


def test_negative_rate_rejected(client_for, student):
    response = client_for(student).put(
        f"/api/profiles/{student.id}/student/", {"hourly_rate": "-5"}, format="json"
    )

    assert response.status_code == 400
    assert "hourly_rate" in response.json()["errors"]


def test_search_filters(api_client, listed_student, other_student):
    services.update_student_profile(other_student.id, other_student, {
        "skills": ["illustration"],
        "categories": ["design"],
        "hourly_rate": Decimal("60"),
        "availability_status": StudentProfile.Availability.BUSY,
    })

    def ids(**params):
        body = api_client.get("/api/profiles/search/", params).json()
        return [row["id"] for row in body["data"]]

    assert set(ids()) == {listed_student.id, other_student.id}
    assert ids(category="data") == [listed_student.id]
    assert ids(skill="illustration") == [other_student.id]
    assert ids(max_rate="30") == [listed_student.id]
    assert ids(min_rate="30") == [other_student.id]
    assert ids(availability_status="busy") == [other_student.id]
    assert ids(location="lyon") == [listed_student.id]
    assert ids(search="PANDAS") == [listed_student.id]
    assert ids(search="data viz") == [listed_student.id]


def test_search_embeds_profile_on_request(api_client, listed_student):
    plain = api_client.get("/api/profiles/search/").json()["data"][0]
    rich = api_client.get("/api/profiles/search/", {"include": "profiles"}).json()["data"][0]

    assert plain["profile"] is None
    assert rich["profile"]["location"] == "Lyon"
    assert rich["profile"]["bio"] == "Python and data viz"


def test_search_rejects_bad_rate(api_client):
    response = api_client.get("/api/profiles/search/", {"min_rate": "cheap"})

    assert response.status_code == 400


def test_onboarding_flow_for_student(client_for, student):
    client = client_for(student)

    start = client.get("/api/onboarding/profile/")
    assert start.status_code == 200
    assert start.json()["data"]["student_profile"]["is_student_profile_complete"] is False

    client.put("/api/onboarding/profile/", {"bio": "CS student", "location": "Paris"}, format="json")
    too_early = client.post("/api/onboarding/complete/")
    assert too_early.status_code == 400

    step_two = client.put("/api/onboarding/student-profile/", {
        "skills": ["react"],
        "categories": ["web"],
    }, format="json")
    assert step_two.status_code == 200

    done = client.post("/api/onboarding/complete/")
    assert done.status_code == 200
    assert done.json()["data"]["profile"]["is_profile_complete"] is True


def test_onboarding_customer_has_no_student_step(client_for, customer):
    start = client_for(customer).get("/api/onboarding/profile/")

    assert start.json()["data"]["student_profile"] is None
    assert client_for(customer).post("/api/onboarding/complete/").status_code == 200


def test_complete_without_profile_is_404(customer):
    with pytest.raises(NotFound):
        services.complete_onboarding(customer)


def test_student_without_step_two_cannot_complete(student):
    services.update_profile(student.id, student, {"bio": "x", "location": "y"})

    with pytest.raises(NotFound):
        services.complete_onboarding(student)

    StudentProfile.objects.create(user=student, skills=["a"])
    with pytest.raises(ValidationError):
        services.complete_onboarding(student)


def test_student_profile_for_rejects_customers(customer):
    with pytest.raises(PermissionDenied):
        services.student_profile_for(customer)
