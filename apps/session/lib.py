"""
Session platform hooks
Local Session - Training session extension for the course platform

=== Hooks ===
1. session_pluginfile: serves the files of the 'local_session' component
2. extend_settings_navigation: decorates the course administration of a
   session course with the session links, and hides the course links that
   only make sense on the course administration page
"""

import logging

from django.conf import settings

from apps.core.access import require_login
from apps.core.files import FileStorage, send_stored_file
from apps.core.models import ContextLevel
from apps.core.navigation import NavigationNode, NodeType, PixIcon, build_url
from apps.trainings.services import SessionService

from . import capabilities as caps
from .strings import BundleStringResolver

logger = logging.getLogger('session')

COMPONENT = 'local_session'
ICON_COMPONENT = 'local_mentor_core'

# Hidden on every page
RESTRICTED_LINKS = [
    'gradebooksetup',
]

# Hidden everywhere except on the course administration page
RESTRICTED_LINKS_OUTSIDE_COURSE_ADMIN = [
    'session_to_training',
    'editsettings',
    'coursecompletion',
    'users',
    'filtermanagement',
    'coursebadges',
    'import',
    'backup',
    'restore',
    'copy',
    'reset',
    'notes',
]


def session_pluginfile(request, course, cm, context, filearea, args, forcedownload, options=None):
    """
    Serve a file of the local_session component.

    Args:
        request: current request, must be authenticated
        course: course of the context, if any
        cm: course module (unused, always None for this component)
        context: Context the file belongs to
        filearea: file area name
        args: path segments relative to the file area
        forcedownload: serve as attachment
        options: transfer options for send_stored_file

    Returns:
        FileResponse, or False when the file cannot be served

    Raises:
        AuthenticationRequired: anonymous request
    """
    require_login(request)

    if context.level != ContextLevel.COURSE:
        return False

    relativepath = '/'.join(args)
    pathnamehash = FileStorage.get_pathname_hash(context.pk, COMPONENT, filearea, relativepath)

    stored_file = FileStorage.get_file_by_hash(pathnamehash)
    if stored_file is None:
        return False

    if stored_file.is_directory:
        return False

    return send_stored_file(stored_file, 0, forcedownload, options)


class SessionNavigationBuilder:
    """
    Adds the session links to a course administration node.
    """

    def __init__(self, settingnode, session, context, page, capabilities, strings):
        self.settingnode = settingnode
        self.session = session
        self.context = context
        self.page = page
        self.capabilities = capabilities
        self.strings = strings
        self.courseid = session.get_course().pk

        self.beforekey = None
        if settingnode.get('editsettings') is not None:
            self.beforekey = 'editsettings'

        self.added = []

    def can(self, *capabilities):
        return all(self.capabilities.has_capability(c, self.context) for c in capabilities)

    def add(self, key, name, action, icon=None, node_type=NodeType.SETTING):
        # find-or-create: a second pass over the same tree adds nothing
        if self.settingnode.get(key) is not None:
            return
        pixicon = PixIcon(icon, name, ICON_COMPONENT) if icon else None
        node = NavigationNode.create(name, action, node_type, key, key, pixicon)
        self.settingnode.add_node(node, self.beforekey)
        self.added.append(key)

    def build(self):
        session = self.session
        courseid = self.courseid
        get_string = self.strings.get_string

        if self.can(caps.UPDATE_SESSION):
            self.add(
                'training',
                get_string('sessionsheet', 'local_session'),
                session.get_sheet_url(self.page.url),
                'list',
            )

        if self.can(caps.ACCESS_CONTENTBANK):
            self.add(
                'content_bank',
                get_string('contentbank', 'local_session'),
                build_url('/contentbank/index.php', {'contextid': session.get_context().pk}),
                'briefcase',
            )

        if self.can(caps.VIEW_PARTICIPANTS):
            self.add(
                'enrolled_users',
                get_string('enrolledusers', 'local_session'),
                build_url('/user/index.php', {'id': courseid}),
                'user',
            )

        # No enrolment import on a closed session
        if not session.is_closed and self.can(caps.IMPORT_USERS):
            self.add(
                'enroll_users',
                get_string('enrollusers', 'local_session'),
                build_url('/local/mentor_core/pages/importcsv.php', {'courseid': courseid}),
                'user-plus',
                NodeType.USER,
            )

        if self.can(caps.VIEW_OUTLINE_REPORT):
            self.add(
                'course_activities',
                get_string('courseactivities', 'local_session'),
                build_url('/report/outline/index.php', {'id': courseid}),
                'flag',
            )

        if self.can(caps.VIEW_COMPLETION_REPORT):
            self.add(
                'training_completion_report',
                get_string('trainingcompletionreport', 'local_session'),
                build_url('/report/completion/index.php', {'course': courseid}),
                'check-square-o',
            )

        if self.can(caps.VIEW_PROGRESS_REPORT):
            self.add(
                'activities_completion_report',
                get_string('activitiescompletionreport', 'local_session'),
                build_url('/report/progress/index.php', {'course': courseid}),
                'check-square',
            )

        if self.can(caps.MANAGE_GROUPS):
            self.add(
                'group',
                get_string('groups', 'moodle'),
                build_url('/group/index.php', {'id': courseid}),
                'users',
            )

        if self.can(caps.VIEW_GRADER_REPORT, caps.VIEW_ALL_GRADES):
            self.add(
                'notes',
                get_string('gradebook', 'local_session'),
                build_url('/grade/report/grader/index.php', {'id': courseid}),
            )

        if self.can(caps.DUPLICATE_SESSION_INTO_TRAINING):
            self.add(
                'session_to_training',
                get_string('duplicatesessionintotraining', 'local_mentor_core'),
                build_url('/local/mentor_core/pages/duplicatesession.php', {'sessionid': session.pk}),
                'users',
                NodeType.USER,
            )

        return self.added


def get_restricted_links(url):
    """Keys of the course administration links to hide on the page ``url``."""
    restricted = list(RESTRICTED_LINKS)
    if settings.COURSE_ADMIN_URL_FRAGMENT not in (url or ''):
        restricted += RESTRICTED_LINKS_OUTSIDE_COURSE_ADMIN
    return restricted


def extend_settings_navigation(settingsnav, context, page, capabilities, strings=None,
                               resolve_session=None):
    """
    Extend the settings navigation of a session course.

    Args:
        settingsnav: root NavigationNode of the settings sidebar
        context: Context the capabilities are checked against
        page: PageState of the page being rendered
        capabilities: CapabilityChecker of the current user
        strings: StringResolver for the labels
        resolve_session: callable(course_id, must_exist) -> Session or None
    """
    if strings is None:
        strings = BundleStringResolver()
    if resolve_session is None:
        resolve_session = SessionService.get_session_by_course_id

    # Only on non-site course pages
    course = page.course
    if course is None or course.pk == settings.SITE_COURSE_ID:
        return

    session = resolve_session(course.pk, must_exist=False)
    if session is None:
        logger.debug(f"Course {course.pk} is not a session course")
        return

    settingnode = settingsnav.find('courseadmin', NodeType.COURSE)
    if settingnode is None:
        logger.debug(f"No course administration node for course {course.pk}")
        return

    builder = SessionNavigationBuilder(settingnode, session, context, page, capabilities, strings)
    added = builder.build()

    hidden = []
    for key in get_restricted_links(page.url):
        link = settingnode.find(key)
        if link is not None:
            link.hide()
            hidden.append(key)

    logger.debug(
        f"Session {session.pk} navigation: added {', '.join(added) or '-'}; "
        f"hidden {', '.join(hidden) or '-'}"
    )
