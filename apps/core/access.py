"""
Access control helpers
Local Session - Training session extension for the course platform

Capabilities are named permissions checked against a context
('local/session:update', 'report/outline:view'...). Components only see the
CapabilityChecker interface; the default checker resolves a capability to a
Django permission through settings.CAPABILITY_PERMISSIONS.
"""

import logging
from typing import Protocol

from django.conf import settings
from django.core.exceptions import PermissionDenied

logger = logging.getLogger('core')


class AuthenticationRequired(PermissionDenied):
    """The request must come from a logged in user."""


def require_login(request):
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        raise AuthenticationRequired('You must be logged in to access this resource.')
    return user


class CapabilityChecker(Protocol):

    def has_capability(self, capability: str, context) -> bool:
        ...


class PermissionCapabilityChecker:
    """
    Capability checks backed by the Django permission system.

    Object-level backends get the context as ``obj``; the global permission
    is used otherwise. Superusers hold every mapped capability.
    """

    def __init__(self, user, mapping=None):
        self.user = user
        self.mapping = settings.CAPABILITY_PERMISSIONS if mapping is None else mapping

    def has_capability(self, capability, context):
        if self.user is None or not self.user.is_authenticated:
            return False

        permission = self.mapping.get(capability)
        if permission is None:
            logger.debug(f"Unknown capability {capability}")
            return False

        if context is not None and self.user.has_perm(permission, context):
            return True
        return self.user.has_perm(permission)
