"""
Template context processors
Local Session - Training session extension for the course platform
"""

from django.conf import settings

from .access import PermissionCapabilityChecker
from .navigation import PageState, build_settings_navigation


def site_settings(request):
    """
    Site-wide template variables
    """
    return {
        'SITE_NAME': 'Local Session',
        'DEBUG': settings.DEBUG,
    }


def settings_navigation(request):
    """
    Settings sidebar of the current page.
    Views showing a course set ``request.course`` before rendering.
    """
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return {'settingsnav': None}

    page = PageState.from_request(request)
    checker = PermissionCapabilityChecker(user)
    return {
        'settingsnav': build_settings_navigation(page, checker),
        'page_state': page,
    }
