import pytest
from django.core.exceptions import ValidationError

from apps.users.models import Role, User


pytestmark = pytest.mark.django_db


def test_register_returns_user_and_tokens(api_client):
    response = api_client.post("/api/auth/register/", {
        "full_name": "Nina Park",
        "email": "Nina@Student.example",
        "role": "student",
        "password": "longenough1",
        "password2": "longenough1",
    }, format="json")

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["user"]["email"] == "nina@student.example"
    assert body["data"]["user"]["role"] == "student"
    assert body["data"]["tokens"]["access"]
    assert body["data"]["tokens"]["refresh"]


def test_register_rejects_duplicate_email(api_client, student):
    response = api_client.post("/api/auth/register/", {
        "full_name": "Copy",
        "email": student.email,
        "role": "customer",
        "password": "longenough1",
        "password2": "longenough1",
    }, format="json")

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "email" in body["errors"]


def test_register_rejects_unknown_role(api_client):
    response = api_client.post("/api/auth/register/", {
        "email": "x@example.com",
        "role": "admin",
        "password": "longenough1",
        "password2": "longenough1",
    }, format="json")

    assert response.status_code == 400
    assert "role" in response.json()["errors"]


def test_login_and_me(api_client, customer):
    response = api_client.post("/api/auth/login/", {
        "email": customer.email,
        "password": "s3cret-pass",
    }, format="json")
    assert response.status_code == 200
    access = response.json()["data"]["tokens"]["access"]

    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
    me = api_client.get("/api/auth/me/")
    assert me.status_code == 200
    assert me.json()["data"]["role"] == "customer"
    assert me.json()["data"]["is_admin"] is False


def test_login_with_wrong_password(api_client, customer):
    response = api_client.post("/api/auth/login/", {
        "email": customer.email,
        "password": "nope",
    }, format="json")

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid email or password"


def test_me_requires_authentication(api_client):
    response = api_client.get("/api/auth/me/")

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_role_cannot_change_after_signup(student):
    user = User.objects.get(pk=student.pk)
    user.role = Role.CUSTOMER

    with pytest.raises(ValidationError):
        user.save()

    assert User.objects.get(pk=student.pk).role == Role.STUDENT


def test_admin_is_staff_not_a_role(admin_user, customer):
    assert admin_user.is_admin
    assert not customer.is_admin
    assert admin_user.role == Role.CUSTOMER
