# apps/missions/serializers.py
from rest_framework import serializers

from apps.users.serializers import UserSummarySerializer
from .models import Mission, Application


class MissionSerializer(serializers.ModelSerializer):
    client = UserSummarySerializer(read_only=True)
    application_count = serializers.SerializerMethodField()

    class Meta:
        model = Mission
        fields = [
            'id',
            'client',
            'title',
            'description',
            'category',
            'budget',
            'deadline',
            'location',
            'is_remote',
            'status',
            'completed_at',
            'cancelled_at',
            'cancellation_reason',
            'application_count',
            'created_at',
            'updated_at',
        ]

    def get_application_count(self, obj):
        count = getattr(obj, 'application_count', None)
        if count is None:
            count = obj.applications.count()
        return count


class MissionWriteSerializer(serializers.ModelSerializer):
    """Input for create and update; status changes are checked by the service layer."""

    status = serializers.ChoiceField(choices=Mission.Status.choices, required=False)
    cancellation_reason = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = Mission
        fields = [
            'title',
            'description',
            'category',
            'budget',
            'deadline',
            'location',
            'is_remote',
            'status',
            'cancellation_reason',
        ]

    def validate_location(self, value):
        return value or None


class MissionSummarySerializer(serializers.ModelSerializer):
    client_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Mission
        fields = ['id', 'title', 'category', 'budget', 'status', 'client_id']


class ApplicationSerializer(serializers.ModelSerializer):
    mission = MissionSummarySerializer(read_only=True)
    student = UserSummarySerializer(read_only=True)

    class Meta:
        model = Application
        fields = [
            'id',
            'mission',
            'student',
            'cover_letter',
            'status',
            'accepted_at',
            'rejected_at',
            'rejection_reason',
            'created_at',
            'updated_at',
        ]


class ApplicationCreateSerializer(serializers.Serializer):
    mission_id = serializers.IntegerField()
    cover_letter = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')


class ApplicationUpdateSerializer(serializers.Serializer):
    cover_letter = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    status = serializers.ChoiceField(
        choices=[Application.Status.ACCEPTED, Application.Status.REJECTED],
        required=False,
    )
    rejection_reason = serializers.CharField(required=False, allow_blank=True)


class RejectApplicationSerializer(serializers.Serializer):
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default='')
