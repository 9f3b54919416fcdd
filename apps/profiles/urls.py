from django.urls import path
from .views import StudentSearchView, ProfileDetailView, StudentProfileDetailView

urlpatterns = [
    path('search/', StudentSearchView.as_view(), name='profile-search'),
    path('<int:pk>/', ProfileDetailView.as_view(), name='profile-detail'),
    path('<int:pk>/student/', StudentProfileDetailView.as_view(), name='student-profile-detail'),
]
