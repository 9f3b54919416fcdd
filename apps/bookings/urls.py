# apps/bookings/urls.py
from django.urls import path
from .views import BookingListCreateView, BookingDetailView, BookingStatsView

urlpatterns = [
    path('', BookingListCreateView.as_view(), name='booking-list'),
    path('stats/', BookingStatsView.as_view(), name='booking-stats'),
    path('<int:pk>/', BookingDetailView.as_view(), name='booking-detail'),
]
