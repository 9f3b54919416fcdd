# apps/missions/urls.py
from django.urls import path
from .views import MissionListCreateView, MissionDetailView, MissionApplicationsView

urlpatterns = [
    path('', MissionListCreateView.as_view(), name='mission-list'),
    path('<int:pk>/', MissionDetailView.as_view(), name='mission-detail'),
    path('<int:pk>/applications/', MissionApplicationsView.as_view(), name='mission-applications'),
]
