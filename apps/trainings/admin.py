"""
Training and session registration in the Django admin
Local Session - Training session extension for the course platform
"""

from django.contrib import admin

from .models import Training, Session


@admin.register(Training)
class TrainingAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'courseshortname', 'created_at']
    search_fields = ['name', 'courseshortname']


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = ['id', 'courseshortname', 'training', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['courseshortname', 'training__name']
    raw_id_fields = ['course', 'training']
