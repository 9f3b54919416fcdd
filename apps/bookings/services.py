# apps/bookings/services.py
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from apps.common.exceptions import InvalidTransition
from apps.users.models import Role
from .models import Booking

logger = logging.getLogger(__name__)
User = get_user_model()


def get_booking(booking_id, for_update=False):
    queryset = Booking.objects.select_for_update() if for_update else Booking.objects.select_related('client', 'student')
    try:
        return queryset.get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFound("Booking not found")


def bookings_for(user):
    """Bookings visible to a user: their side of each booking, or all for admins."""
    queryset = Booking.objects.select_related('client', 'student')
    if user.is_admin:
        return queryset
    if user.is_student:
        return queryset.filter(student=user)
    return queryset.filter(client=user)


def create_booking(client, data):
    if not client.is_customer:
        raise PermissionDenied("Only customers can create bookings")

    total = Booking.compute_total(data['hourly_rate'], data['hours'])
    if not Booking.total_fits(total):
        raise ValidationError({"hours": "Total amount (hourly_rate x hours) is too large"})

    try:
        student = User.objects.get(pk=data['student_id'], role=Role.STUDENT)
    except User.DoesNotExist:
        raise NotFound("Student not found")

    booking = Booking.objects.create(
        client=client,
        student=student,
        date=data['date'],
        hours=data['hours'],
        description=data['description'],
        hourly_rate=data['hourly_rate'],
        total_amount=total,
        status=Booking.Status.PENDING,
    )
    logger.info("Booking %s created: client %s, student %s, total %s",
                booking.pk, client.pk, student.pk, booking.total_amount)
    return booking


def get_booking_for(booking_id, actor):
    booking = get_booking(booking_id)
    if not (booking.is_party(actor) or actor.is_admin):
        raise PermissionDenied("Not authorized to access this booking")
    return booking


def transition_booking(booking_id, actor, new_status, reason=None):
    """
    Move a booking along its transition table.

    Only the student may confirm a pending booking; either party may
    complete or cancel it.
    """
    if new_status not in Booking.Status.values:
        raise ValidationError({"status": f"'{new_status}' is not a valid booking status"})

    with transaction.atomic():
        booking = get_booking(booking_id, for_update=True)

        if not booking.is_party(actor):
            raise PermissionDenied("Not authorized to update this booking")
        if not booking.can_transition_to(new_status):
            raise InvalidTransition(f"Cannot change status from {booking.status} to {new_status}")
        if new_status == Booking.Status.CONFIRMED and actor.id != booking.student_id:
            raise PermissionDenied("Only the student can confirm a booking")

        logger.info("Booking %s: %s -> %s by %s", booking.pk, booking.status, new_status, actor.pk)
        booking.status = new_status
        setattr(booking, Booking.STATUS_TIMESTAMPS[new_status], timezone.now())
        if new_status == Booking.Status.CANCELLED and reason:
            booking.cancellation_reason = reason.strip()
        booking.save()

    return booking


def booking_stats(user):
    bookings = bookings_for(user).order_by()

    by_status = {
        row['status']: row['count']
        for row in bookings.values('status').annotate(count=Count('id'))
    }
    totals = bookings.aggregate(
        earnings=Sum('total_amount', filter=Q(status=Booking.Status.COMPLETED)),
        spent=Sum('total_amount', filter=Q(status__in=[Booking.Status.CONFIRMED, Booking.Status.COMPLETED])),
        upcoming=Count('id', filter=Q(
            status__in=[Booking.Status.PENDING, Booking.Status.CONFIRMED],
            date__gte=timezone.now(),
        )),
    )

    return {
        "total": sum(by_status.values()),
        "pending": by_status.get(Booking.Status.PENDING, 0),
        "confirmed": by_status.get(Booking.Status.CONFIRMED, 0),
        "completed": by_status.get(Booking.Status.COMPLETED, 0),
        "cancelled": by_status.get(Booking.Status.CANCELLED, 0),
        "total_earnings": (totals['earnings'] or 0) if user.is_student else 0,
        "total_spent": (totals['spent'] or 0) if user.is_customer else 0,
        "upcoming_bookings": totals['upcoming'],
    }
