from django.http import Http404
from rest_framework import exceptions

from apps.common.exceptions import Conflict, InvalidTransition, api_exception_handler


def test_api_errors_use_the_response_envelope():
    response = api_exception_handler(Conflict("You have already applied to this mission"), {})

    assert response.status_code == 409
    assert response.data == {
        "success": False,
        "message": "You have already applied to this mission",
        "code": "conflict",
    }


def test_invalid_transition_is_a_bad_request():
    response = api_exception_handler(InvalidTransition(), {})

    assert response.status_code == 400
    assert response.data["code"] == "invalid_transition"


def test_validation_errors_keep_field_detail():
    exc = exceptions.ValidationError({"budget": ["Ensure this value is greater than or equal to 0."]})

    response = api_exception_handler(exc, {})

    assert response.status_code == 400
    assert response.data["message"] == "Ensure this value is greater than or equal to 0."
    assert response.data["code"] == "invalid"
    assert "budget" in response.data["errors"]


def test_django_404_is_converted():
    response = api_exception_handler(Http404("Nothing here"), {})

    assert response.status_code == 404
    assert response.data["success"] is False


def test_unexpected_errors_hide_detail(settings):
    settings.DEBUG = False

    response = api_exception_handler(RuntimeError("db password is hunter2"), {"view": None})

    assert response.status_code == 500
    assert response.data == {
        "success": False,
        "message": "Internal server error",
        "code": "server_error",
    }


def test_unexpected_errors_show_detail_in_debug(settings):
    settings.DEBUG = True

    response = api_exception_handler(RuntimeError("boom"), {"view": None})

    assert response.status_code == 500
    assert response.data["detail"] == "RuntimeError: boom"
