"""
Language strings of the session navigation
Local Session - Training session extension for the course platform

Labels are looked up by (key, component), the way every component of the
platform exposes its strings. An unknown key renders as [[key]] so a
missing translation is visible without breaking the page.
"""

import logging
from typing import Protocol

from django.utils.translation import gettext_lazy as _

logger = logging.getLogger('session')

STRINGS = {
    'local_session': {
        'sessionsheet': _('Session sheet'),
        'contentbank': _('Content bank'),
        'enrolledusers': _('Enrolled users'),
        'enrollusers': _('Enrol users'),
        'courseactivities': _('Course activities'),
        'trainingcompletionreport': _('Course completion report'),
        'activitiescompletionreport': _('Activity completion report'),
        'gradebook': _('Gradebook'),
    },
    'local_mentor_core': {
        'duplicatesessionintotraining': _('Create a new training from this session'),
    },
    'moodle': {
        'groups': _('Groups'),
    },
}


def get_string(key, component='moodle'):
    try:
        return str(STRINGS[component][key])
    except KeyError:
        logger.warning(f"Missing string {key} in {component}")
        return f"[[{key}]]"


class StringResolver(Protocol):

    def get_string(self, key: str, component: str = 'moodle') -> str:
        ...


class BundleStringResolver:
    """StringResolver over the STRINGS catalogue."""

    def get_string(self, key, component='moodle'):
        return get_string(key, component)
