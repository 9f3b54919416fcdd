# apps/missions/services.py
"""
Mission and application lifecycle.

Every function re-derives authorization from the stored ownership fields and
runs multi-row changes inside a single transaction, locking the rows whose
status it changes. The one-application-per-student rule is guaranteed by the
database constraint on (mission, student), not by a prior lookup.
"""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from apps.common.exceptions import Conflict, InvalidTransition
from .models import Mission, Application

logger = logging.getLogger(__name__)


def get_mission(mission_id, for_update=False):
    queryset = Mission.objects.select_for_update() if for_update else Mission.objects.select_related('client')
    try:
        return queryset.get(pk=mission_id)
    except Mission.DoesNotExist:
        raise NotFound("Mission not found")


def get_application(application_id, for_update=False):
    queryset = Application.objects.select_for_update() if for_update else Application.objects.select_related('mission', 'student')
    try:
        return queryset.get(pk=application_id)
    except Application.DoesNotExist:
        raise NotFound("Application not found")


# ========================================
# MISSIONS
# ========================================
def create_mission(actor, data):
    if not actor.is_customer:
        raise PermissionDenied("Only customers can create missions")

    data = dict(data)
    data.pop('status', None)
    data.pop('cancellation_reason', None)
    if data.get('is_remote'):
        data['location'] = None

    mission = Mission.objects.create(client=actor, status=Mission.Status.OPEN, **data)
    logger.info("Mission %s created by %s", mission.pk, actor.pk)
    return mission


def _change_mission_status(mission, new_status, reason=None):
    if new_status == mission.status:
        return
    if not mission.can_transition_to(new_status):
        raise InvalidTransition(f"Cannot change mission status from {mission.status} to {new_status}")

    now = timezone.now()
    logger.info("Mission %s: %s -> %s", mission.pk, mission.status, new_status)
    mission.status = new_status
    if new_status == Mission.Status.COMPLETED:
        mission.completed_at = now
    elif new_status == Mission.Status.CANCELLED:
        mission.cancelled_at = now
        if reason:
            mission.cancellation_reason = reason.strip()


def update_mission(mission_id, actor, data):
    data = dict(data)
    new_status = data.pop('status', None)
    reason = data.pop('cancellation_reason', None)

    with transaction.atomic():
        mission = get_mission(mission_id, for_update=True)
        if not mission.is_managed_by(actor):
            raise PermissionDenied("Not authorized to update this mission")

        for field, value in data.items():
            setattr(mission, field, value)
        if mission.is_remote:
            mission.location = None

        if new_status is not None:
            _change_mission_status(mission, new_status, reason)

        mission.save()

    return mission


def delete_mission(mission_id, actor):
    with transaction.atomic():
        mission = get_mission(mission_id, for_update=True)
        if not mission.is_managed_by(actor):
            raise PermissionDenied("Not authorized to delete this mission")
        mission.delete()
    logger.info("Mission %s deleted by %s", mission_id, actor.pk)


# ========================================
# APPLICATIONS
# ========================================
def _has_applied(mission, student):
    return Application.objects.filter(mission=mission, student=student).exists()


def create_application(mission_id, student, cover_letter=''):
    if not student.is_student:
        raise PermissionDenied("Only students can create applications")
    if not mission_id:
        raise ValidationError({"mission_id": "Mission ID is required"})

    mission = get_mission(mission_id)
    # A repeat application is a conflict whatever the mission's status is now
    if _has_applied(mission, student):
        raise Conflict("You have already applied to this mission")
    if mission.status != Mission.Status.OPEN:
        raise ValidationError({"mission_id": "Mission is not open for applications"})

    try:
        with transaction.atomic():
            application = Application.objects.create(
                mission=mission,
                student=student,
                cover_letter=(cover_letter or '').strip(),
                status=Application.Status.PENDING,
            )
    except IntegrityError:
        raise Conflict("You have already applied to this mission")

    logger.info("Application %s: student %s applied to mission %s", application.pk, student.pk, mission.pk)
    return application


def decide_application(application_id, actor, decision, reason=None):
    """
    Accept or reject a pending application as the mission owner.

    Accepting forces the mission into in_discussion within the same
    transaction, whatever non-terminal status it had.
    """
    if decision not in (Application.Status.ACCEPTED, Application.Status.REJECTED):
        raise ValidationError({"status": f"'{decision}' is not a valid decision"})
    verb = "accept" if decision == Application.Status.ACCEPTED else "reject"

    with transaction.atomic():
        application = get_application(application_id, for_update=True)
        mission = get_mission(application.mission_id, for_update=True)

        if mission.client_id != actor.id:
            raise PermissionDenied(f"Only mission owner can {verb} applications")
        if application.status != Application.Status.PENDING:
            raise InvalidTransition(f"Application is already {application.status}")

        now = timezone.now()
        if decision == Application.Status.ACCEPTED:
            if mission.is_terminal:
                raise InvalidTransition(f"Cannot accept applications for a {mission.status} mission")
            application.accepted_at = now
            mission.status = Mission.Status.IN_DISCUSSION
            mission.save(update_fields=['status', 'updated_at'])
        else:
            application.rejected_at = now
            if reason:
                application.rejection_reason = reason.strip()

        application.status = decision
        application.save()

    logger.info("Application %s %s by %s", application.pk, decision, actor.pk)
    application.mission = mission
    return application


def update_application(application_id, actor, data):
    with transaction.atomic():
        application = get_application(application_id, for_update=True)
        mission = get_mission(application.mission_id)
        is_owner = mission.client_id == actor.id
        is_applicant = application.student_id == actor.id

        if not is_owner and not is_applicant:
            raise PermissionDenied("Not authorized to update this application")

        if 'cover_letter' in data:
            if not is_applicant:
                raise PermissionDenied("Only the applicant can edit the cover letter")
            application.cover_letter = (data['cover_letter'] or '').strip()
            application.save(update_fields=['cover_letter', 'updated_at'])

        if data.get('status'):
            application = decide_application(
                application.pk, actor, data['status'], data.get('rejection_reason')
            )

    return application


def get_application_for(application_id, actor):
    application = get_application(application_id)
    is_owner = application.mission.client_id == actor.id
    is_applicant = application.student_id == actor.id
    if not (is_owner or is_applicant or actor.is_admin):
        raise PermissionDenied("Not authorized to access this application")
    return application
