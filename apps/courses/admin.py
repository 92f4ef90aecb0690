"""
Course registration in the Django admin
Local Session - Training session extension for the course platform
"""

from django.contrib import admin

from .models import Course


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['id', 'shortname', 'fullname', 'category', 'created_at']
    list_filter = ['category']
    search_fields = ['shortname', 'fullname']
    readonly_fields = ['created_at']
