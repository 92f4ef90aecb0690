"""
URL Configuration for Trainings App
Local Session - Training session extension for the course platform
"""

from django.urls import path
from .views import SessionSheetView

app_name = 'trainings'

urlpatterns = [
    path('session/<int:pk>/sheet/', SessionSheetView.as_view(), name='session_sheet'),
]
