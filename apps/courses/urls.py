"""
URL Configuration for Courses App
Local Session - Training session extension for the course platform
"""

from django.urls import path
from .views import CourseView, CourseAdminView

app_name = 'courses'

urlpatterns = [
    path('view/<int:course_id>/', CourseView.as_view(), name='view'),
    path('admin/<int:course_id>/', CourseAdminView.as_view(), name='admin'),
]
