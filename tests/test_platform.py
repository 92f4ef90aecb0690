"""
Tests of the platform seams used by the session extension
Local Session - Training session extension for the course platform

Covers: navigation tree, stored files, capability checker, hook registry,
pluginfile dispatcher, session lookup, course pages rendering the sidebar.
"""

import shutil
import tempfile

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser, Permission
from django.test import TestCase, Client, SimpleTestCase, override_settings
from django.urls import reverse

from apps.core.access import PermissionCapabilityChecker
from apps.core.files import FileStorage
from apps.core.models import Context, ContextLevel, StoredFile, compute_pathname_hash
from apps.core.navigation import NavigationNode, NodeType, PageState, build_url, build_settings_navigation
from apps.core.plugins import (
    get_pluginfile_callback, get_settings_navigation_extenders, register_settings_navigation_extender,
)
from apps.courses.models import Course
from apps.session.lib import extend_settings_navigation, session_pluginfile
from apps.trainings.models import Training, Session
from apps.trainings.services import SessionService

User = get_user_model()

MEDIA_ROOT = tempfile.mkdtemp()


class BaseTestMixin:
    """Course and user creation helpers."""

    @classmethod
    def create_courses(cls):
        cls.site_course = Course.objects.create(
            pk=settings.SITE_COURSE_ID, shortname='site', fullname='Front page'
        )
        cls.course = Course.objects.create(shortname='S1', fullname='Session one')
        cls.context = Context.for_course(cls.course)

    @classmethod
    def create_user(cls, username='user', perms=()):
        user = User.objects.create_user(username=username, password='TestPass123!')
        for perm in perms:
            app_label, codename = perm.split('.')
            user.user_permissions.add(
                Permission.objects.get(content_type__app_label=app_label, codename=codename)
            )
        return User.objects.get(pk=user.pk)


# ============================================================================
# 1. Navigation tree
# ============================================================================

class NavigationNodeTest(SimpleTestCase):

    def make_tree(self):
        root = NavigationNode.create('Settings', node_type=NodeType.ROOT, key='settings')
        admin = root.add_node(NavigationNode.create('Admin', node_type=NodeType.COURSE, key='courseadmin'))
        admin.add('Edit', '/edit', key='editsettings')
        users = admin.add('Users', '/users', key='users')
        users.add('Enrolled', '/enrolled', key='enrolled')
        return root, admin

    def test_add_node_before_key(self):
        _, admin = self.make_tree()
        admin.add_node(NavigationNode.create('New', key='new'), 'users')
        self.assertEqual(admin.get_children_key_list(), ['editsettings', 'new', 'users'])

    def test_add_node_unknown_before_key_appends(self):
        _, admin = self.make_tree()
        admin.add_node(NavigationNode.create('New', key='new'), 'missing')
        self.assertEqual(admin.get_children_key_list(), ['editsettings', 'users', 'new'])

    def test_add_node_sets_parent(self):
        _, admin = self.make_tree()
        node = admin.add_node(NavigationNode.create('New', key='new'))
        self.assertIs(node.parent, admin)

    def test_get_only_looks_at_children(self):
        root, admin = self.make_tree()
        self.assertIsNone(root.get('users'))
        self.assertIsNotNone(admin.get('users'))
        self.assertIsNone(admin.get('enrolled'))

    def test_find_is_recursive_and_typed(self):
        root, admin = self.make_tree()
        self.assertIs(root.find('courseadmin', NodeType.COURSE), admin)
        self.assertIsNone(root.find('courseadmin', NodeType.SETTING))
        self.assertEqual(root.find('enrolled').action, '/enrolled')

    def test_hide_keeps_node(self):
        _, admin = self.make_tree()
        admin.get('users').hide()
        self.assertEqual(admin.get_children_key_list(), ['editsettings', 'users'])
        self.assertEqual([n.key for n in admin.visible_children()], ['editsettings'])

    def test_url_of_container(self):
        self.assertEqual(NavigationNode.create('Container').url, '#')

    def test_build_url(self):
        self.assertEqual(build_url('/user/index.php', {'id': 4}), '/user/index.php?id=4')
        self.assertEqual(build_url('/report/progress/index.php?', {'course': 4}), '/report/progress/index.php?course=4')
        self.assertEqual(build_url('/a?b=1', {'c': 2}), '/a?b=1&c=2')
        self.assertEqual(build_url('/a'), '/a')


# ============================================================================
# 2. Stored files
# ============================================================================

@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class FileStorageTest(TestCase, BaseTestMixin):

    @classmethod
    def setUpTestData(cls):
        cls.create_courses()

    @classmethod
    def tearDownClass(cls):
        super().tearDownClass()
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)

    def test_pathname_hash(self):
        stored = FileStorage.create_file_from_string(self.context, 'local_session', 'area', 'a/b.txt', 'x')
        self.assertEqual(stored.pathnamehash, compute_pathname_hash(self.context.pk, 'local_session', 'area', 'a/b.txt'))
        self.assertEqual(len(stored.pathnamehash), 40)
        self.assertEqual(stored.filename, 'b.txt')
        self.assertEqual(stored.filesize, 1)

    def test_get_file_by_hash(self):
        stored = FileStorage.create_file_from_string(self.context, 'local_session', 'area', 'c.txt', 'x')
        found = FileStorage.get_file_by_hash(
            FileStorage.get_pathname_hash(self.context.pk, 'local_session', 'area', 'c.txt')
        )
        self.assertEqual(found, stored)
        self.assertIsNone(FileStorage.get_file_by_hash('0' * 40))

    def test_create_directory(self):
        directory = FileStorage.create_directory(self.context, 'local_session', 'area', 'docs')
        self.assertTrue(directory.is_directory)
        self.assertEqual(directory.filepath, 'docs/')
        self.assertEqual(StoredFile.objects.count(), 1)


# ============================================================================
# 3. Capabilities and hooks
# ============================================================================

class CapabilityCheckerTest(TestCase, BaseTestMixin):

    @classmethod
    def setUpTestData(cls):
        cls.create_courses()

    def test_mapped_capability(self):
        user = self.create_user(perms=['courses.view_outline_report'])
        checker = PermissionCapabilityChecker(user)
        self.assertTrue(checker.has_capability('report/outline:view', self.context))
        self.assertFalse(checker.has_capability('report/completion:view', self.context))

    def test_unknown_capability(self):
        user = User.objects.create_superuser(username='root', password='TestPass123!')
        self.assertFalse(PermissionCapabilityChecker(user).has_capability('mod/unknown:view', self.context))

    def test_superuser_holds_mapped_capabilities(self):
        user = User.objects.create_superuser(username='root', password='TestPass123!')
        self.assertTrue(PermissionCapabilityChecker(user).has_capability('local/session:update', self.context))

    def test_anonymous_user(self):
        self.assertFalse(PermissionCapabilityChecker(AnonymousUser()).has_capability('report/outline:view', None))


class PluginRegistryTest(SimpleTestCase):

    def test_session_hooks_are_registered(self):
        self.assertIs(get_pluginfile_callback('local_session'), session_pluginfile)
        self.assertIn(extend_settings_navigation, get_settings_navigation_extenders())
        self.assertIsNone(get_pluginfile_callback('local_unknown'))

    def test_registration_is_idempotent(self):
        before = get_settings_navigation_extenders()
        register_settings_navigation_extender(extend_settings_navigation)
        self.assertEqual(get_settings_navigation_extenders(), before)


# ============================================================================
# 4. Sessions
# ============================================================================

class SessionServiceTest(TestCase, BaseTestMixin):

    @classmethod
    def setUpTestData(cls):
        cls.create_courses()
        cls.training = Training.objects.create(courseshortname='falsetraining')
        cls.session = Session.objects.create(course=cls.course, training=cls.training)

    def test_get_session_by_course_id(self):
        self.assertEqual(SessionService.get_session_by_course_id(self.course.pk), self.session)

    def test_missing_session_strict(self):
        with self.assertRaises(Session.DoesNotExist):
            SessionService.get_session_by_course_id(self.site_course.pk)

    def test_missing_session_not_strict(self):
        self.assertIsNone(SessionService.get_session_by_course_id(self.site_course.pk, must_exist=False))

    def test_closed_statuses(self):
        for status, _ in Session.STATUS_CHOICES:
            with self.subTest(status=status):
                session = Session(course=self.course, training=self.training, status=status)
                self.assertEqual(
                    session.is_closed,
                    status in (Session.STATUS_ARCHIVED, Session.STATUS_COMPLETED, Session.STATUS_CANCELLED),
                )

    def test_session_accessors(self):
        self.assertEqual(self.session.courseshortname, 'S1')
        self.assertEqual(self.session.get_course(), self.course)
        self.assertEqual(self.session.get_context(), self.context)
        self.assertFalse(self.session.is_closed)
        self.assertEqual(
            self.session.get_sheet_url('/course/view/2/'),
            reverse('trainings:session_sheet', kwargs={'pk': self.session.pk}) + '?returnto=%2Fcourse%2Fview%2F2%2F',
        )


# ============================================================================
# 5. HTTP surface
# ============================================================================

@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class PluginFileViewTest(TestCase, BaseTestMixin):

    @classmethod
    def setUpTestData(cls):
        cls.create_courses()
        cls.user = cls.create_user()

    @classmethod
    def tearDownClass(cls):
        super().tearDownClass()
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)

    def setUp(self):
        self.client = Client()
        self.client.force_login(self.user)

    def url(self, relativepath, component='local_session', contextid=None):
        return reverse('core:pluginfile', kwargs={
            'contextid': contextid or self.context.pk,
            'component': component,
            'filearea': 'attachments',
            'relativepath': relativepath,
        })

    def test_file_is_served(self):
        FileStorage.create_file_from_string(self.context, 'local_session', 'attachments', 'doc/a.txt', 'hello')
        response = self.client.get(self.url('doc/a.txt'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(b''.join(response.streaming_content), b'hello')
        self.assertTrue(response['Content-Disposition'].startswith('inline'))

    def test_forcedownload_query(self):
        FileStorage.create_file_from_string(self.context, 'local_session', 'attachments', 'b.txt', 'x')
        response = self.client.get(self.url('b.txt'), {'forcedownload': 1})
        self.assertTrue(response['Content-Disposition'].startswith('attachment'))
        b''.join(response.streaming_content)

    def test_refusal_is_404(self):
        self.assertEqual(self.client.get(self.url('missing.txt')).status_code, 404)

    def test_unknown_component_is_404(self):
        self.assertEqual(self.client.get(self.url('a.txt', component='local_unknown')).status_code, 404)

    def test_unknown_context_is_404(self):
        self.assertEqual(self.client.get(self.url('a.txt', contextid=99999)).status_code, 404)

    def test_non_course_context_is_404(self):
        system = Context.objects.create(level=ContextLevel.SYSTEM, instance_id=0)
        FileStorage.create_file_from_string(system, 'local_session', 'attachments', 'a.txt', 'x')
        self.assertEqual(self.client.get(self.url('a.txt', contextid=system.pk)).status_code, 404)

    def test_anonymous_is_403(self):
        FileStorage.create_file_from_string(self.context, 'local_session', 'attachments', 'c.txt', 'x')
        self.assertEqual(Client().get(self.url('c.txt')).status_code, 403)


class CoursePagesTest(TestCase, BaseTestMixin):

    @classmethod
    def setUpTestData(cls):
        cls.create_courses()
        cls.training = Training.objects.create(courseshortname='falsetraining')
        cls.session = Session.objects.create(
            course=cls.course, training=cls.training, status=Session.STATUS_IN_PROGRESS
        )
        cls.manager = cls.create_user('manager', settings.CAPABILITY_PERMISSIONS.values())

    def setUp(self):
        self.client = Client()
        self.client.force_login(self.manager)

    def test_course_page_sidebar(self):
        response = self.client.get(reverse('courses:view', kwargs={'course_id': self.course.pk}))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'data-key="training"')
        self.assertContains(response, 'data-key="coursereports"')
        self.assertNotContains(response, 'data-key="editsettings"')
        self.assertNotContains(response, 'data-key="gradebooksetup"')
        self.assertNotContains(response, 'data-key="session_to_training"')

    def test_course_admin_page_sidebar(self):
        response = self.client.get(reverse('courses:admin', kwargs={'course_id': self.course.pk}))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'data-key="editsettings"')
        self.assertContains(response, 'data-key="session_to_training"')
        self.assertNotContains(response, 'data-key="gradebooksetup"')

    def test_site_course_has_no_course_admin(self):
        page = PageState(url='/', course=self.site_course, context=Context.for_course(self.site_course))
        settingsnav = build_settings_navigation(page, PermissionCapabilityChecker(self.manager))
        self.assertIsNone(settingsnav.find('courseadmin', NodeType.COURSE))

    def test_login_required(self):
        response = Client().get(reverse('courses:view', kwargs={'course_id': self.course.pk}))
        self.assertEqual(response.status_code, 302)

    def test_session_sheet(self):
        url = self.session.get_sheet_url('/course/view/2/')
        response = self.client.get(url)
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'falsetraining')
        self.assertContains(response, 'href="/course/view/2/"')
