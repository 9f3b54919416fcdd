from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from apps.bookings.models import Booking
from apps.missions.models import Mission
from apps.users.models import Role, User


def make_user(email: str, role: str, **extra) -> User:
    return User.objects.create_user(
        username=email,
        email=email,
        password="s3cret-pass",
        role=role,
        full_name=email.split("@")[0].title(),
        **extra,
    )


@pytest.fixture()
def student(db) -> User:
    return make_user("sam@student.example", Role.STUDENT)


@pytest.fixture()
def other_student(db) -> User:
    return make_user("sasha@student.example", Role.STUDENT)


@pytest.fixture()
def customer(db) -> User:
    return make_user("carla@customer.example", Role.CUSTOMER)


@pytest.fixture()
def other_customer(db) -> User:
    return make_user("chris@customer.example", Role.CUSTOMER)


@pytest.fixture()
def admin_user(db) -> User:
    return make_user("ada@staff.example", Role.CUSTOMER, is_staff=True)


@pytest.fixture()
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture()
def client_for():
    """Build an APIClient authenticated as the given user."""

    def _client_for(user: User) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client_for


@pytest.fixture()
def mission(customer) -> Mission:
    return Mission.objects.create(
        client=customer,
        title="Build a landing page",
        description="One page site for a bakery",
        category="web",
        budget=Decimal("250.00"),
    )


@pytest.fixture()
def booking(customer, student) -> Booking:
    return Booking.objects.create(
        client=customer,
        student=student,
        date=timezone.now() + timedelta(days=3),
        hours=Decimal("3"),
        hourly_rate=Decimal("20"),
        description="Tutoring session",
    )
