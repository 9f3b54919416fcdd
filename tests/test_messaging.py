from unittest import mock

import pytest
from django.db import IntegrityError, transaction
from rest_framework.exceptions import PermissionDenied, ValidationError

from apps.messaging import services
from apps.messaging.models import Conversation, Message
from apps.messaging.socket import broadcast_message, user_room


pytestmark = pytest.mark.django_db


@pytest.fixture()
def conversation(customer, student):
    conversation, _ = services.get_or_create_conversation(customer, student.id)
    return conversation


def test_conversation_is_created_once(client_for, customer, student, mission):
    first = client_for(customer).post("/api/conversations/", {
        "student_id": student.id,
        "mission_id": mission.id,
    }, format="json")
    second = client_for(student).post("/api/conversations/", {
        "client_id": customer.id,
        "mission_id": mission.id,
    }, format="json")

    assert first.status_code == 201
    assert second.status_code == 200
    assert first.json()["data"]["id"] == second.json()["data"]["id"]
    assert Conversation.objects.filter(client=customer, student=student, mission=mission).count() == 1


def test_missionless_conversation_is_unique_too(customer, student):
    first, created = services.get_or_create_conversation(customer, student.id)
    again, created_again = services.get_or_create_conversation(student, customer.id)

    assert created and not created_again
    assert first.pk == again.pk

    with pytest.raises(IntegrityError), transaction.atomic():
        Conversation.objects.create(client=customer, student=student, mission=None)


def test_conversation_per_mission_is_separate(customer, student, mission):
    general, _ = services.get_or_create_conversation(customer, student.id)
    about_mission, created = services.get_or_create_conversation(customer, student.id, mission.id)

    assert created
    assert general.pk != about_mission.pk


def test_counterpart_must_have_opposite_role(customer, other_customer):
    from rest_framework.exceptions import NotFound

    with pytest.raises(NotFound):
        services.get_or_create_conversation(customer, other_customer.id)


def test_counterpart_id_is_required(client_for, student):
    response = client_for(student).post("/api/conversations/", {}, format="json")

    assert response.status_code == 400
    assert "client_id" in response.json()["errors"]


def test_send_updates_conversation_summary(student, conversation):
    message = services.post_message(conversation.id, student, "  Hello there  ")

    conversation.refresh_from_db()
    assert message.content == "Hello there"
    assert conversation.last_message == "Hello there"
    assert conversation.last_message_at == message.created_at


def test_blank_message_rejected(student, conversation):
    with pytest.raises(ValidationError):
        services.post_message(conversation.id, student, "   ")

    assert not Message.objects.exists()


def test_non_party_cannot_send_or_read(client_for, other_student, conversation):
    client = client_for(other_student)

    send = client.post(f"/api/conversations/{conversation.id}/messages/", {"content": "hi"}, format="json")
    read = client.get(f"/api/conversations/{conversation.id}/messages/")

    assert send.status_code == 403
    assert read.status_code == 403

    with pytest.raises(PermissionDenied):
        services.post_message(conversation.id, other_student, "hi")


def test_reading_marks_other_party_messages_read(client_for, customer, student, conversation):
    services.post_message(conversation.id, customer, "Are you free Friday?")
    services.post_message(conversation.id, student, "Yes")

    listing = client_for(student).get("/api/conversations/").json()
    assert listing["data"][0]["unread_count"] == 1

    response = client_for(student).get(f"/api/conversations/{conversation.id}/messages/")

    assert response.status_code == 200
    data = response.json()["data"]
    assert [row["content"] for row in data] == ["Are you free Friday?", "Yes"]
    assert data[0]["is_read"] is True
    assert data[0]["is_send_by_me"] is False
    # The reader's own message stays unread until the customer opens the thread
    assert data[1]["is_read"] is False
    assert Message.objects.get(content="Yes").read_at is None


def test_posting_broadcasts_after_commit(client_for, student, conversation, django_capture_on_commit_callbacks):
    with mock.patch("apps.messaging.views.broadcast_message") as broadcast:
        with django_capture_on_commit_callbacks(execute=True):
            response = client_for(student).post(
                f"/api/conversations/{conversation.id}/messages/", {"content": "On my way"}, format="json"
            )

    assert response.status_code == 201
    broadcast.assert_called_once()
    assert broadcast.call_args.args[0].content == "On my way"


def test_broadcast_targets_both_user_rooms(customer, student, conversation):
    message = services.post_message(conversation.id, customer, "See you soon")

    with mock.patch("apps.messaging.socket.sio.emit", new_callable=mock.AsyncMock) as emit:
        broadcast_message(message)

    events = {(call.args[0], call.kwargs["room"]) for call in emit.call_args_list}
    assert events == {
        ("new_message", user_room(student.id)),
        ("message_sent", user_room(customer.id)),
    }
    assert emit.call_args_list[0].args[1]["content"] == "See you soon"


def test_broadcast_flags_the_sender_copy(customer, student, conversation):
    message = services.post_message(conversation.id, student, "Running late")

    with mock.patch("apps.messaging.socket.sio.emit", new_callable=mock.AsyncMock) as emit:
        broadcast_message(message)

    payloads = {call.args[0]: call.args[1] for call in emit.call_args_list}
    assert payloads["new_message"]["is_send_by_me"] is False
    assert payloads["message_sent"]["is_send_by_me"] is True
    assert payloads["new_message"]["id"] == payloads["message_sent"]["id"] == message.id


def test_conversations_sorted_by_latest_message(client_for, customer, student, other_student):
    older, _ = services.get_or_create_conversation(customer, student.id)
    newer, _ = services.get_or_create_conversation(customer, other_student.id)
    services.post_message(older.id, customer, "bump")

    response = client_for(customer).get("/api/conversations/", {"sort": "-updated_at"})

    assert [row["id"] for row in response.json()["data"]] == [older.id, newer.id]
