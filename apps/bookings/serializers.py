# apps/bookings/serializers.py
from decimal import Decimal

from rest_framework import serializers

from apps.users.serializers import UserSummarySerializer
from .models import Booking


class BookingSerializer(serializers.ModelSerializer):
    client = UserSummarySerializer(read_only=True)
    student = UserSummarySerializer(read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id',
            'client',
            'student',
            'date',
            'hours',
            'description',
            'hourly_rate',
            'total_amount',
            'status',
            'confirmed_at',
            'completed_at',
            'cancelled_at',
            'cancellation_reason',
            'created_at',
            'updated_at',
        ]


class BookingCreateSerializer(serializers.Serializer):
    student_id = serializers.IntegerField()
    date = serializers.DateTimeField()
    hours = serializers.DecimalField(max_digits=6, decimal_places=2, min_value=Decimal('1'))
    description = serializers.CharField()
    hourly_rate = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=Decimal('0'))

    def validate(self, data):
        total = Booking.compute_total(data['hourly_rate'], data['hours'])
        if not Booking.total_fits(total):
            raise serializers.ValidationError({"hours": "Total amount (hourly_rate x hours) is too large"})
        return data


class BookingUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.Status.choices)
    cancellation_reason = serializers.CharField(required=False, allow_blank=True, default='')


class BookingStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    pending = serializers.IntegerField()
    confirmed = serializers.IntegerField()
    completed = serializers.IntegerField()
    cancelled = serializers.IntegerField()
    total_earnings = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_spent = serializers.DecimalField(max_digits=12, decimal_places=2)
    upcoming_bookings = serializers.IntegerField()
