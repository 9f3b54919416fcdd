from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Django admin
    path('admin/', admin.site.urls),
    path('api/auth/', include('apps.users.urls')),
    path('api/missions/', include('apps.missions.urls')),
    path('api/applications/', include('apps.missions.application_urls')),
    path('api/bookings/', include('apps.bookings.urls')),
    path('api/conversations/', include('apps.messaging.urls')),
    path('api/profiles/', include('apps.profiles.urls')),
    path('api/onboarding/', include('apps.profiles.onboarding_urls')),
]
