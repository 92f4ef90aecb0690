"""
Tests of the session platform hooks
Local Session - Training session extension for the course platform

Covers:
1. session_pluginfile: context level, lookup by path hash, directories,
   delivery options, authentication
2. extend_settings_navigation: early exits, capability gated links,
   session status, anchor position, restricted links, re-invocation
3. Integration with the host sidebar through the Django permission system
"""

import copy
import shutil
import tempfile

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser, Permission
from django.test import TestCase, RequestFactory, override_settings

from apps.core.access import AuthenticationRequired, PermissionCapabilityChecker
from apps.core.files import FileStorage
from apps.core.models import Context, ContextLevel
from apps.core.navigation import (
    NavigationNode, NodeType, PageState, build_course_admin_node, build_settings_navigation,
)
from apps.courses.models import Course
from apps.trainings.models import Training, Session

from . import capabilities as caps
from .lib import (
    COMPONENT, RESTRICTED_LINKS_OUTSIDE_COURSE_ADMIN, extend_settings_navigation,
    get_restricted_links, session_pluginfile,
)
from .strings import BundleStringResolver, get_string

User = get_user_model()

MEDIA_ROOT = tempfile.mkdtemp()

SESSION_KEYS = [
    'training',
    'content_bank',
    'enrolled_users',
    'enroll_users',
    'course_activities',
    'training_completion_report',
    'activities_completion_report',
    'group',
    'session_to_training',
]

DEFAULT_KEYS = [
    'editsettings',
    'users',
    'filtermanagement',
    'coursereports',
    'gradebooksetup',
    'coursebadges',
    'import',
    'backup',
    'restore',
    'copy',
    'reset',
    'questionbank',
]


class FakeCapabilities:
    """Capability checker granting a fixed set of capabilities"""

    def __init__(self, granted=()):
        self.granted = set(granted)
        self.checked = []

    def has_capability(self, capability, context):
        self.checked.append(capability)
        return capability in self.granted


class SessionTestBase(TestCase):
    """Shared data: site course, a session course, a plain course"""

    @classmethod
    def setUpTestData(cls):
        cls.site_course = Course.objects.create(
            pk=settings.SITE_COURSE_ID, shortname='site', fullname='Front page'
        )
        cls.course = Course.objects.create(shortname='session-course', fullname='Session course')
        cls.plain_course = Course.objects.create(shortname='plain-course', fullname='Plain course')
        cls.context = Context.for_course(cls.course)
        cls.plain_context = Context.for_course(cls.plain_course)

        cls.training = Training.objects.create(name='Training', courseshortname='falsetraining')
        cls.session = Session.objects.create(
            course=cls.course,
            training=cls.training,
            status=Session.STATUS_IN_PROGRESS,
        )

    def make_settingsnav(self, course=None, context=None, with_course_admin=True):
        settingsnav = NavigationNode.create('Settings', node_type=NodeType.ROOT, key='settings')
        if with_course_admin:
            settingsnav.add_node(build_course_admin_node(course or self.course, context or self.context))
        return settingsnav

    def make_page(self, course=None, url=None):
        course = self.course if course is None else course
        if url is None:
            url = f'/course/view/{course.pk}/'
        return PageState(url=url, course=course, context=Context.for_course(course))

    def extend(self, settingsnav, granted=(), page=None, **kwargs):
        page = page or self.make_page()
        extend_settings_navigation(
            settingsnav, page.context, page, FakeCapabilities(granted), **kwargs
        )
        return settingsnav.find('courseadmin', NodeType.COURSE)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class SessionPluginFileTests(SessionTestBase):
    """session_pluginfile"""

    @classmethod
    def tearDownClass(cls):
        super().tearDownClass()
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)

    def setUp(self):
        self.factory = RequestFactory()
        self.user = User.objects.create_user(username='learner', password='TestPass123!')

    def make_request(self, user=None):
        request = self.factory.get('/pluginfile/')
        request.user = user or self.user
        return request

    def test_anonymous_request_is_rejected(self):
        request = self.make_request(AnonymousUser())
        with self.assertRaises(AuthenticationRequired):
            session_pluginfile(request, self.course, None, self.context, 'attachments', ['a.txt'], False)

    def test_non_course_context_is_refused(self):
        category_context = Context.objects.create(level=ContextLevel.COURSECAT, instance_id=3)
        FileStorage.create_file_from_string(category_context, COMPONENT, 'attachments', 'a.txt', 'data')

        result = session_pluginfile(
            self.make_request(), None, None, category_context, 'attachments', ['a.txt'], False
        )
        self.assertIs(result, False)

    def test_missing_file_is_refused(self):
        result = session_pluginfile(
            self.make_request(), self.course, None, self.context, 'attachments', ['missing.pdf'], False
        )
        self.assertIs(result, False)

    def test_directory_is_refused(self):
        FileStorage.create_directory(self.context, COMPONENT, 'attachments', 'docs')
        result = session_pluginfile(
            self.make_request(), self.course, None, self.context, 'attachments', ['docs', ''], False
        )
        self.assertIs(result, False)

    def test_file_of_another_component_is_refused(self):
        FileStorage.create_file_from_string(self.context, 'local_other', 'attachments', 'a.txt', 'data')
        result = session_pluginfile(
            self.make_request(), self.course, None, self.context, 'attachments', ['a.txt'], False
        )
        self.assertIs(result, False)

    def test_file_is_streamed_inline(self):
        FileStorage.create_file_from_string(
            self.context, COMPONENT, 'attachments', '2023/notes.txt', 'session notes'
        )
        response = session_pluginfile(
            self.make_request(), self.course, None, self.context, 'attachments', ['2023', 'notes.txt'], False
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(b''.join(response.streaming_content), b'session notes')
        self.assertEqual(response['Content-Type'], 'text/plain')
        self.assertTrue(response['Content-Disposition'].startswith('inline'))
        self.assertIn('notes.txt', response['Content-Disposition'])
        self.assertEqual(response['Cache-Control'], 'no-cache')
        response.close()

    def test_forcedownload_and_cache_options(self):
        FileStorage.create_file_from_string(self.context, COMPONENT, 'attachments', 'sheet.pdf', b'%PDF-1.4')
        response = session_pluginfile(
            self.make_request(), self.course, None, self.context, 'attachments', ['sheet.pdf'], True,
            {'lifetime': 3600, 'cacheability': 'public', 'filename': 'session-sheet.pdf'},
        )
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response['Content-Disposition'].startswith('attachment'))
        self.assertIn('session-sheet.pdf', response['Content-Disposition'])
        self.assertEqual(response['Cache-Control'], 'public, max-age=3600')
        response.close()


class NavigationEarlyExitTests(SessionTestBase):
    """The tree is left untouched"""

    def assertUnchanged(self, settingsnav, page, granted=caps.ALL):
        snapshot = copy.deepcopy(settingsnav)
        extend_settings_navigation(settingsnav, page.context, page, FakeCapabilities(granted))
        self.assertEqual(settingsnav, snapshot)

    def test_no_course(self):
        page = PageState(url='/', course=None, context=None)
        self.assertUnchanged(self.make_settingsnav(), page)

    def test_site_course(self):
        page = self.make_page(course=self.site_course, url='/')
        self.assertUnchanged(self.make_settingsnav(self.site_course), page)

    def test_course_without_session(self):
        page = self.make_page(course=self.plain_course)
        self.assertUnchanged(self.make_settingsnav(self.plain_course, self.plain_context), page)

    def test_no_course_admin_node(self):
        settingsnav = self.make_settingsnav(with_course_admin=False)
        self.assertUnchanged(settingsnav, self.make_page())
        self.assertEqual(settingsnav.get_children_key_list(), [])

    def test_session_lookup_is_not_strict(self):
        calls = []

        def resolve_session(course_id, must_exist=True):
            calls.append((course_id, must_exist))
            return None

        page = self.make_page()
        extend_settings_navigation(
            self.make_settingsnav(), page.context, page, FakeCapabilities(caps.ALL),
            resolve_session=resolve_session,
        )
        self.assertEqual(calls, [(self.course.pk, False)])


class NavigationLinksTests(SessionTestBase):
    """Capability gated links"""

    def test_no_capability_adds_nothing(self):
        courseadmin = self.extend(self.make_settingsnav())
        keys = courseadmin.get_children_key_list()

        for key in DEFAULT_KEYS:
            self.assertIn(key, keys)
        for key in SESSION_KEYS:
            self.assertNotIn(key, keys)
        self.assertNotIn('notes', keys)

    def test_all_capabilities_add_every_link(self):
        courseadmin = self.extend(self.make_settingsnav(), caps.ALL)
        keys = courseadmin.get_children_key_list()

        for key in SESSION_KEYS + ['notes']:
            self.assertIn(key, keys)
        for key in DEFAULT_KEYS:
            self.assertIn(key, keys)

    def test_each_capability_adds_its_own_link(self):
        expected = {
            caps.UPDATE_SESSION: 'training',
            caps.ACCESS_CONTENTBANK: 'content_bank',
            caps.VIEW_PARTICIPANTS: 'enrolled_users',
            caps.IMPORT_USERS: 'enroll_users',
            caps.VIEW_OUTLINE_REPORT: 'course_activities',
            caps.VIEW_COMPLETION_REPORT: 'training_completion_report',
            caps.VIEW_PROGRESS_REPORT: 'activities_completion_report',
            caps.MANAGE_GROUPS: 'group',
            caps.DUPLICATE_SESSION_INTO_TRAINING: 'session_to_training',
        }
        for capability, key in expected.items():
            with self.subTest(capability=capability):
                courseadmin = self.extend(self.make_settingsnav(), [capability])
                added = set(courseadmin.get_children_key_list()) - set(DEFAULT_KEYS + ['coursecompletion'])
                self.assertEqual(added, {key})

    def test_gradebook_needs_both_capabilities(self):
        for granted in ([caps.VIEW_GRADER_REPORT], [caps.VIEW_ALL_GRADES]):
            with self.subTest(granted=granted):
                courseadmin = self.extend(self.make_settingsnav(), granted)
                self.assertIsNone(courseadmin.get('notes'))

        courseadmin = self.extend(self.make_settingsnav(), [caps.VIEW_GRADER_REPORT, caps.VIEW_ALL_GRADES])
        self.assertIsNotNone(courseadmin.get('notes'))

    def test_closed_session_has_no_enrolment_import(self):
        for status in Session.CLOSED_STATUSES:
            with self.subTest(status=status):
                self.session.status = status
                self.session.save()
                courseadmin = self.extend(self.make_settingsnav(), caps.ALL)
                self.assertIsNone(courseadmin.get('enroll_users'))
                self.assertIsNotNone(courseadmin.get('training'))

    def test_open_session_statuses_allow_enrolment_import(self):
        open_statuses = [code for code, _ in Session.STATUS_CHOICES if code not in Session.CLOSED_STATUSES]
        for status in open_statuses:
            with self.subTest(status=status):
                self.session.status = status
                self.session.save()
                courseadmin = self.extend(self.make_settingsnav(), [caps.IMPORT_USERS])
                self.assertIsNotNone(courseadmin.get('enroll_users'))

    def test_link_targets(self):
        courseadmin = self.extend(self.make_settingsnav(), caps.ALL)
        courseid = self.course.pk

        self.assertEqual(
            courseadmin.get('training').action,
            self.session.get_sheet_url(f'/course/view/{courseid}/'),
        )
        self.assertEqual(
            courseadmin.get('content_bank').action,
            f'/contentbank/index.php?contextid={self.context.pk}',
        )
        self.assertEqual(courseadmin.get('enrolled_users').action, f'/user/index.php?id={courseid}')
        self.assertEqual(
            courseadmin.get('enroll_users').action,
            f'/local/mentor_core/pages/importcsv.php?courseid={courseid}',
        )
        self.assertEqual(courseadmin.get('course_activities').action, f'/report/outline/index.php?id={courseid}')
        self.assertEqual(
            courseadmin.get('training_completion_report').action,
            f'/report/completion/index.php?course={courseid}',
        )
        self.assertEqual(
            courseadmin.get('activities_completion_report').action,
            f'/report/progress/index.php?course={courseid}',
        )
        self.assertEqual(courseadmin.get('group').action, f'/group/index.php?id={courseid}')
        self.assertEqual(courseadmin.get('notes').action, f'/grade/report/grader/index.php?id={courseid}')
        self.assertEqual(
            courseadmin.get('session_to_training').action,
            f'/local/mentor_core/pages/duplicatesession.php?sessionid={self.session.pk}',
        )

    def test_labels_icons_and_types(self):
        courseadmin = self.extend(self.make_settingsnav(), caps.ALL)

        training = courseadmin.get('training')
        self.assertEqual(training.text, get_string('sessionsheet', 'local_session'))
        self.assertEqual(training.icon.name, 'list')
        self.assertEqual(training.icon.component, 'local_mentor_core')
        self.assertEqual(training.node_type, NodeType.SETTING)

        self.assertEqual(courseadmin.get('group').text, get_string('groups', 'moodle'))
        self.assertEqual(courseadmin.get('enroll_users').node_type, NodeType.USER)
        self.assertEqual(courseadmin.get('session_to_training').node_type, NodeType.USER)
        self.assertIsNone(courseadmin.get('notes').icon)

    def test_links_are_inserted_before_editsettings(self):
        courseadmin = self.extend(self.make_settingsnav(), caps.ALL)
        keys = courseadmin.get_children_key_list()

        self.assertEqual(keys[:len(SESSION_KEYS) + 1], SESSION_KEYS[:8] + ['notes', 'session_to_training'])
        self.assertEqual(keys[len(SESSION_KEYS) + 1], 'editsettings')

    def test_links_are_appended_without_editsettings(self):
        settingsnav = self.make_settingsnav()
        courseadmin = settingsnav.find('courseadmin', NodeType.COURSE)
        courseadmin.children = [child for child in courseadmin.children if child.key != 'editsettings']

        self.extend(settingsnav, [caps.UPDATE_SESSION, caps.MANAGE_GROUPS])
        self.assertEqual(courseadmin.get_children_key_list()[-2:], ['training', 'group'])

    def test_second_pass_does_not_duplicate_links(self):
        settingsnav = self.make_settingsnav()
        self.extend(settingsnav, caps.ALL)
        keys = settingsnav.find('courseadmin').get_children_key_list()

        self.extend(settingsnav, caps.ALL)
        self.assertEqual(settingsnav.find('courseadmin').get_children_key_list(), keys)

    def test_custom_string_resolver(self):
        class UpperStrings(BundleStringResolver):
            def get_string(self, key, component='moodle'):
                return key.upper()

        courseadmin = self.extend(self.make_settingsnav(), [caps.UPDATE_SESSION], strings=UpperStrings())
        self.assertEqual(courseadmin.get('training').text, 'SESSIONSHEET')


class NavigationRestrictedLinksTests(SessionTestBase):
    """Hidden course administration links"""

    def test_gradebooksetup_is_always_hidden(self):
        for url in (f'/course/view/{self.course.pk}/', f'/course/admin/{self.course.pk}/'):
            with self.subTest(url=url):
                courseadmin = self.extend(self.make_settingsnav(), page=self.make_page(url=url))
                self.assertFalse(courseadmin.get('gradebooksetup').display)

    def test_outside_course_admin_page(self):
        courseadmin = self.extend(self.make_settingsnav(), caps.ALL)

        self.assertEqual(len(RESTRICTED_LINKS_OUTSIDE_COURSE_ADMIN), 12)
        for key in RESTRICTED_LINKS_OUTSIDE_COURSE_ADMIN:
            node = courseadmin.get(key)
            self.assertIsNotNone(node, key)
            self.assertFalse(node.display, key)

        for key in ['coursereports', 'questionbank', 'training', 'group', 'enroll_users']:
            self.assertTrue(courseadmin.get(key).display, key)

    def test_on_course_admin_page(self):
        page = self.make_page(url=f'/course/admin/{self.course.pk}/')
        courseadmin = self.extend(self.make_settingsnav(), caps.ALL, page=page)

        hidden = [child.key for child in courseadmin.children if not child.display]
        self.assertEqual(hidden, ['gradebooksetup'])

    def test_nested_restricted_link_is_hidden(self):
        for url, hidden in ((f'/course/view/{self.course.pk}/', True), (f'/course/admin/{self.course.pk}/', False)):
            with self.subTest(url=url):
                settingsnav = self.make_settingsnav()
                courseadmin = settingsnav.find('courseadmin', NodeType.COURSE)
                courseadmin.children = [child for child in courseadmin.children if child.key != 'reset']
                reports = courseadmin.get('coursereports')
                reports.add('Reset', '/course/reset.php', key='reset')

                self.extend(settingsnav, page=self.make_page(url=url))

                self.assertIsNone(courseadmin.get('reset'))
                self.assertEqual(reports.get('reset').display, not hidden)
                self.assertTrue(reports.display)

    def test_hidden_links_stay_in_the_tree(self):
        courseadmin = self.extend(self.make_settingsnav())
        keys = courseadmin.get_children_key_list()
        visible = [child.key for child in courseadmin.visible_children()]

        self.assertIn('editsettings', keys)
        self.assertNotIn('editsettings', visible)

    def test_restricted_links_for_url(self):
        self.assertEqual(get_restricted_links('/course/admin/5/'), ['gradebooksetup'])
        self.assertEqual(
            get_restricted_links('/course/view/5/'),
            ['gradebooksetup'] + RESTRICTED_LINKS_OUTSIDE_COURSE_ADMIN,
        )

    @override_settings(COURSE_ADMIN_URL_FRAGMENT='/course/admin.php')
    def test_course_admin_fragment_is_configurable(self):
        self.assertEqual(get_restricted_links('/course/admin.php?id=5'), ['gradebooksetup'])
        self.assertEqual(len(get_restricted_links('/course/admin/5/')), 13)


class SessionNavigationIntegrationTests(SessionTestBase):
    """Host sidebar + Django permissions"""

    def grant(self, user, *perms):
        for perm in perms:
            app_label, codename = perm.split('.')
            user.user_permissions.add(
                Permission.objects.get(content_type__app_label=app_label, codename=codename)
            )
        # Permissions are cached on the instance
        return User.objects.get(pk=user.pk)

    def test_sidebar_of_a_session_course(self):
        user = User.objects.create_user(username='manager', password='TestPass123!')
        user = self.grant(user, *settings.CAPABILITY_PERMISSIONS.values())

        page = PageState(
            url=f'/course/view/{self.course.pk}/', course=self.course, context=self.context, user=user
        )
        settingsnav = build_settings_navigation(page, PermissionCapabilityChecker(user))
        courseadmin = settingsnav.find('courseadmin', NodeType.COURSE)

        keys = courseadmin.get_children_key_list()
        for key in SESSION_KEYS + DEFAULT_KEYS:
            self.assertIn(key, keys)
        self.assertFalse(courseadmin.get('editsettings').display)

    def test_participant_without_permissions(self):
        user = User.objects.create_user(username='participant', password='TestPass123!')
        user = self.grant(user, 'courses.change_course')

        page = PageState(
            url=f'/course/view/{self.course.pk}/', course=self.course, context=self.context, user=user
        )
        settingsnav = build_settings_navigation(page, PermissionCapabilityChecker(user))
        keys = settingsnav.find('courseadmin', NodeType.COURSE).get_children_key_list()

        for key in SESSION_KEYS:
            self.assertNotIn(key, keys)
