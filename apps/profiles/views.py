# apps/profiles/views.py
from rest_framework import generics, permissions
from rest_framework.response import Response

from . import services
from .serializers import (
    ProfileSerializer,
    ProfileUpdateSerializer,
    StudentProfileSerializer,
    StudentProfileUpdateSerializer,
    StudentSearchResultSerializer,
)


def _public_read(request):
    if request.method == 'GET':
        return [permissions.AllowAny()]
    return [permissions.IsAuthenticated()]


# ========================================
# 1. STUDENT SEARCH (public)
# ========================================
class StudentSearchView(generics.ListAPIView):
    permission_classes = [permissions.AllowAny]
    serializer_class = StudentSearchResultSerializer

    def list(self, request, *args, **kwargs):
        results = services.search_student_profiles(request.query_params)
        include = request.query_params.get('include', '')
        serializer = self.get_serializer(
            results,
            many=True,
            context={'include_profile': 'profiles' in include.split(',')},
        )
        return Response({
            "success": True,
            "data": serializer.data,
            "count": len(results),
        })


# ========================================
# 2. PROFILE BY USER: public read / owner or admin update
# ========================================
class ProfileDetailView(generics.GenericAPIView):
    serializer_class = ProfileSerializer

    def get_permissions(self):
        return _public_read(self.request)

    def get(self, request, pk):
        profile = services.get_profile(pk)
        return Response({
            "success": True,
            "data": ProfileSerializer(profile).data,
        })

    def put(self, request, pk):
        serializer = ProfileUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        profile = services.update_profile(pk, request.user, serializer.validated_data)
        return Response({
            "success": True,
            "message": "Profile updated successfully",
            "data": ProfileSerializer(profile).data,
        })

    patch = put


class StudentProfileDetailView(generics.GenericAPIView):
    serializer_class = StudentProfileSerializer

    def get_permissions(self):
        return _public_read(self.request)

    def get(self, request, pk):
        student_profile = services.get_student_profile(pk)
        return Response({
            "success": True,
            "data": StudentProfileSerializer(student_profile).data,
        })

    def put(self, request, pk):
        serializer = StudentProfileUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        student_profile = services.update_student_profile(pk, request.user, serializer.validated_data)
        return Response({
            "success": True,
            "message": "Student profile updated successfully",
            "data": StudentProfileSerializer(student_profile).data,
        })

    patch = put


# ========================================
# 3. ONBOARDING (current user)
# ========================================
class OnboardingProfileView(generics.GenericAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = ProfileSerializer

    def get(self, request):
        user = request.user
        profile = services.profile_for(user)
        student_profile = services.student_profile_for(user) if user.is_student else None
        return Response({
            "success": True,
            "data": {
                "profile": ProfileSerializer(profile).data,
                "student_profile": StudentProfileSerializer(student_profile).data if student_profile else None,
            }
        })

    def put(self, request):
        serializer = ProfileUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        profile = services.update_profile(request.user.id, request.user, serializer.validated_data)
        return Response({
            "success": True,
            "message": "Profile updated successfully",
            "data": {"profile": ProfileSerializer(profile).data},
        })


class OnboardingStudentProfileView(generics.GenericAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = StudentProfileUpdateSerializer

    def put(self, request):
        serializer = self.get_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        student_profile = services.update_student_profile(request.user.id, request.user, serializer.validated_data)
        return Response({
            "success": True,
            "message": "Student profile updated successfully",
            "data": {"student_profile": StudentProfileSerializer(student_profile).data},
        })


class CompleteOnboardingView(generics.GenericAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = ProfileSerializer

    def post(self, request):
        profile = services.complete_onboarding(request.user)
        return Response({
            "success": True,
            "message": "Onboarding completed successfully",
            "data": {"profile": ProfileSerializer(profile).data},
        })
