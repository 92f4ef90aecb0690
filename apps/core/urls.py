"""Core platform URLs"""
from django.urls import path
from .views import PluginFileView

app_name = 'core'

urlpatterns = [
    path(
        'pluginfile/<int:contextid>/<str:component>/<str:filearea>/<path:relativepath>',
        PluginFileView.as_view(),
        name='pluginfile',
    ),
]
