# apps/bookings/views.py
from django.db import transaction
from rest_framework import generics, permissions, status
from rest_framework.response import Response

from apps.users.permissions import IsCustomer
from . import services
from .serializers import (
    BookingSerializer,
    BookingCreateSerializer,
    BookingUpdateSerializer,
    BookingStatsSerializer,
)


# 1. Bookings: list (own side) / create (customers)
class BookingListCreateView(generics.ListCreateAPIView):
    serializer_class = BookingSerializer

    def get_permissions(self):
        if self.request.method == 'POST':
            return [permissions.IsAuthenticated(), IsCustomer()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):
        queryset = services.bookings_for(self.request.user)
        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return queryset.order_by('-created_at')

    def list(self, request, *args, **kwargs):
        bookings = self.get_serializer(self.get_queryset(), many=True).data
        return Response({
            "success": True,
            "data": bookings,
            "count": len(bookings),
        })

    def create(self, request, *args, **kwargs):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        # Nothing is kept unless the created booking also serializes
        with transaction.atomic():
            booking = services.create_booking(request.user, serializer.validated_data)
            data = BookingSerializer(booking).data

        return Response({
            "success": True,
            "message": "Booking created successfully",
            "data": data,
        }, status=status.HTTP_201_CREATED)


# 2. Booking detail: retrieve (parties or admin) / status change (parties)
class BookingDetailView(generics.RetrieveUpdateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = BookingSerializer

    def retrieve(self, request, pk):
        booking = services.get_booking_for(pk, request.user)
        return Response({
            "success": True,
            "data": BookingSerializer(booking).data,
        })

    def update(self, request, pk, partial=False):
        serializer = BookingUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.transition_booking(
            pk,
            request.user,
            serializer.validated_data['status'],
            serializer.validated_data['cancellation_reason'],
        )

        return Response({
            "success": True,
            "message": "Booking updated successfully",
            "data": BookingSerializer(booking).data,
        })


# 3. Stats for the current user
class BookingStatsView(generics.GenericAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = BookingStatsSerializer

    def get(self, request):
        stats = services.booking_stats(request.user)
        return Response({
            "success": True,
            "data": self.get_serializer(stats).data,
        })
