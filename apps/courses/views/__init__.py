"""
Views Package
Local Session - Training session extension for the course platform
"""

from .course import (
    CourseView,
    CourseAdminView,
)

__all__ = [
    'CourseView',
    'CourseAdminView',
]
