from django.urls import path
from .views import OnboardingProfileView, OnboardingStudentProfileView, CompleteOnboardingView

urlpatterns = [
    path('profile/', OnboardingProfileView.as_view(), name='onboarding-profile'),
    path('student-profile/', OnboardingStudentProfileView.as_view(), name='onboarding-student-profile'),
    path('complete/', CompleteOnboardingView.as_view(), name='onboarding-complete'),
]
