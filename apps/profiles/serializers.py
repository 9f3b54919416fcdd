# apps/profiles/serializers.py
from decimal import Decimal

from rest_framework import serializers

from .models import Profile, StudentProfile


class ProfileSerializer(serializers.ModelSerializer):
    id = serializers.IntegerField(source='user_id', read_only=True)
    full_name = serializers.CharField(source='user.full_name', read_only=True)
    role = serializers.CharField(source='user.role', read_only=True)

    class Meta:
        model = Profile
        fields = [
            'id',
            'full_name',
            'role',
            'bio',
            'phone',
            'location',
            'is_profile_complete',
            'updated_at',
        ]


class ProfileUpdateSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    bio = serializers.CharField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    location = serializers.CharField(max_length=200, required=False, allow_blank=True)


class StudentProfileSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = StudentProfile
        fields = [
            'user_id',
            'skills',
            'categories',
            'hourly_rate',
            'availability_status',
            'is_student_profile_complete',
            'updated_at',
        ]


class StudentProfileUpdateSerializer(serializers.Serializer):
    skills = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    categories = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    hourly_rate = serializers.DecimalField(
        max_digits=8, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True
    )
    availability_status = serializers.ChoiceField(choices=StudentProfile.Availability.choices, required=False)

    def validate_skills(self, value):
        return [skill.strip() for skill in value if skill.strip()]

    def validate_categories(self, value):
        return [category.strip() for category in value if category.strip()]


class StudentSearchResultSerializer(StudentProfileSerializer):
    """Search row; the public profile is embedded only when ?include=profiles."""

    id = serializers.IntegerField(source='user_id', read_only=True)
    profile = serializers.SerializerMethodField()

    class Meta(StudentProfileSerializer.Meta):
        fields = ['id'] + StudentProfileSerializer.Meta.fields + ['profile']

    def get_profile(self, obj):
        if not self.context.get('include_profile'):
            return None
        profile = getattr(obj.user, 'profile', None)
        return {
            "id": obj.user_id,
            "full_name": obj.user.full_name,
            "location": profile.location if profile else '',
            "phone": profile.phone if profile else '',
            "bio": profile.bio if profile else '',
        }
