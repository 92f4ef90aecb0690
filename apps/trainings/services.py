"""
Session service layer
Local Session - Training session extension for the course platform
"""

import logging

from .models import Session

logger = logging.getLogger('trainings')


class SessionService:
    """
    Lookups of sessions for other components.
    """

    @classmethod
    def get_session_by_course_id(cls, course_id, must_exist=True):
        """
        Session attached to the course.

        Args:
            course_id: id of the session course
            must_exist: raise Session.DoesNotExist instead of returning None

        Returns:
            Session or None
        """
        session = Session.objects.select_related('course', 'training').filter(course_id=course_id).first()
        if session is None:
            if must_exist:
                raise Session.DoesNotExist(f"No session for course {course_id}")
            logger.debug(f"No session for course {course_id}")
        return session
