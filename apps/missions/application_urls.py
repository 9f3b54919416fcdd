# apps/missions/application_urls.py
from django.urls import path
from .views import (
    ApplicationListCreateView,
    ApplicationDetailView,
    accept_application,
    reject_application,
)

urlpatterns = [
    path('', ApplicationListCreateView.as_view(), name='application-list'),
    path('<int:pk>/', ApplicationDetailView.as_view(), name='application-detail'),
    path('<int:pk>/accept/', accept_application, name='application-accept'),
    path('<int:pk>/reject/', reject_application, name='application-reject'),
]
