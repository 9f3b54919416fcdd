# apps/messaging/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path('', views.ConversationListCreateView.as_view(), name='conversation-list'),
    path('<int:pk>/', views.ConversationDetailView.as_view(), name='conversation-detail'),
    path('<int:pk>/messages/', views.ConversationMessagesView.as_view(), name='conversation-messages'),
]
