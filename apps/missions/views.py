# apps/missions/views.py
from django.db.models import Count
from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from apps.users.permissions import IsCustomer, IsStudent
from . import services
from .models import Mission, Application
from .serializers import (
    MissionSerializer,
    MissionWriteSerializer,
    ApplicationSerializer,
    ApplicationCreateSerializer,
    ApplicationUpdateSerializer,
    RejectApplicationSerializer,
)

SORT_OPTIONS = {
    'created_at': 'created_at',
    '-created_at': '-created_at',
}


def _ordering(request):
    return SORT_OPTIONS.get(request.query_params.get('sort'), '-created_at')


def _int_list(raw, name):
    try:
        return [int(part) for part in raw.split(',') if part.strip()]
    except ValueError:
        raise ValidationError({name: "Expected a comma-separated list of ids"})


def _int_param(raw, name):
    try:
        return int(raw)
    except ValueError:
        raise ValidationError({name: "Expected an integer id"})


# ========================================
# 1. MISSIONS: list (public) / create (customers)
# ========================================
class MissionListCreateView(generics.ListCreateAPIView):
    serializer_class = MissionSerializer

    def get_permissions(self):
        if self.request.method == 'GET':
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated(), IsCustomer()]

    def get_queryset(self):
        params = self.request.query_params
        queryset = Mission.objects.select_related('client').annotate(
            application_count=Count('applications')
        )

        if params.get('client_id'):
            queryset = queryset.filter(client_id=_int_param(params['client_id'], 'client_id'))
        if params.get('status'):
            queryset = queryset.filter(status=params['status'])
        if params.get('category'):
            queryset = queryset.filter(category=params['category'])
        if params.get('ids'):
            queryset = queryset.filter(id__in=_int_list(params['ids'], 'ids'))

        return queryset.order_by(_ordering(self.request))

    def list(self, request, *args, **kwargs):
        missions = self.get_serializer(self.get_queryset(), many=True).data
        return Response({
            "success": True,
            "data": missions,
            "count": len(missions),
        })

    def create(self, request, *args, **kwargs):
        serializer = MissionWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        mission = services.create_mission(request.user, serializer.validated_data)

        return Response({
            "success": True,
            "message": "Mission created successfully",
            "data": MissionSerializer(mission).data,
        }, status=status.HTTP_201_CREATED)


# ========================================
# 2. MISSION DETAIL: retrieve (public) / update / delete (owner or admin)
# ========================================
class MissionDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = MissionSerializer

    def get_permissions(self):
        if self.request.method == 'GET':
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated()]

    def retrieve(self, request, pk):
        mission = services.get_mission(pk)
        return Response({
            "success": True,
            "data": MissionSerializer(mission).data,
        })

    def update(self, request, pk, partial=False):
        serializer = MissionWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        mission = services.update_mission(pk, request.user, serializer.validated_data)

        return Response({
            "success": True,
            "message": "Mission updated successfully",
            "data": MissionSerializer(mission).data,
        })

    def destroy(self, request, pk):
        services.delete_mission(pk, request.user)
        return Response({
            "success": True,
            "message": "Mission deleted successfully",
        })


# ========================================
# 3. APPLICATIONS OF ONE MISSION
# ========================================
class MissionApplicationsView(generics.ListAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = ApplicationSerializer

    def list(self, request, pk):
        mission = services.get_mission(pk)
        queryset = Application.objects.filter(mission=mission).select_related('mission', 'student')

        # Students (and any non-owner) only see their own application
        if not mission.is_managed_by(request.user):
            queryset = queryset.filter(student=request.user)

        if request.query_params.get('status'):
            queryset = queryset.filter(status=request.query_params['status'])

        applications = self.get_serializer(queryset.order_by('-created_at'), many=True).data
        return Response({
            "success": True,
            "data": applications,
            "count": len(applications),
        })


# ========================================
# 4. APPLICATIONS: list / create (students)
# ========================================
class ApplicationListCreateView(generics.ListCreateAPIView):
    serializer_class = ApplicationSerializer

    def get_permissions(self):
        if self.request.method == 'POST':
            return [permissions.IsAuthenticated(), IsStudent()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):
        user = self.request.user
        params = self.request.query_params
        queryset = Application.objects.select_related('mission', 'student')

        if user.is_admin:
            if params.get('student_id'):
                queryset = queryset.filter(student_id=_int_param(params['student_id'], 'student_id'))
        elif user.is_student:
            queryset = queryset.filter(student=user)
        else:
            queryset = queryset.filter(mission__client=user)
            if params.get('student_id'):
                queryset = queryset.filter(student_id=_int_param(params['student_id'], 'student_id'))

        if params.get('mission_id'):
            queryset = queryset.filter(mission_id=_int_param(params['mission_id'], 'mission_id'))
        if params.get('status'):
            queryset = queryset.filter(status=params['status'])

        return queryset.order_by(_ordering(self.request))

    def list(self, request, *args, **kwargs):
        applications = self.get_serializer(self.get_queryset(), many=True).data
        return Response({
            "success": True,
            "data": applications,
            "count": len(applications),
        })

    def create(self, request, *args, **kwargs):
        serializer = ApplicationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = services.create_application(
            serializer.validated_data['mission_id'],
            request.user,
            serializer.validated_data['cover_letter'],
        )

        return Response({
            "success": True,
            "message": "Application created successfully",
            "data": ApplicationSerializer(application).data,
        }, status=status.HTTP_201_CREATED)


# ========================================
# 5. APPLICATION DETAIL: retrieve / update
# ========================================
class ApplicationDetailView(generics.RetrieveUpdateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = ApplicationSerializer

    def retrieve(self, request, pk):
        application = services.get_application_for(pk, request.user)
        return Response({
            "success": True,
            "data": ApplicationSerializer(application).data,
        })

    def update(self, request, pk, partial=False):
        serializer = ApplicationUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = services.update_application(pk, request.user, serializer.validated_data)

        return Response({
            "success": True,
            "message": "Application updated successfully",
            "data": ApplicationSerializer(application).data,
        })


# 6. Accept Application
@api_view(['PUT'])
@permission_classes([permissions.IsAuthenticated])
def accept_application(request, pk):
    """
    Mission owner accepts a pending application.
    The mission moves to in_discussion in the same transaction.
    """
    application = services.decide_application(pk, request.user, Application.Status.ACCEPTED)

    return Response({
        "success": True,
        "message": "Application accepted successfully",
        "data": ApplicationSerializer(application).data,
    }, status=status.HTTP_200_OK)


# 7. Reject Application
@api_view(['PUT'])
@permission_classes([permissions.IsAuthenticated])
def reject_application(request, pk):
    serializer = RejectApplicationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    application = services.decide_application(
        pk, request.user, Application.Status.REJECTED, serializer.validated_data['rejection_reason']
    )

    return Response({
        "success": True,
        "message": "Application rejected successfully",
        "data": ApplicationSerializer(application).data,
    }, status=status.HTTP_200_OK)
