"""
URL configuration for the Local Session project.
"""

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Django Admin
    path('admin/', admin.site.urls),

    # Platform core (pluginfile)
    path('', include('apps.core.urls')),

    # Course pages
    path('course/', include('apps.courses.urls')),

    # Trainings and sessions
    path('trainings/', include('apps.trainings.urls')),
]

# Admin site customization
admin.site.site_header = "Local Session administration"
admin.site.site_title = "Local Session"
