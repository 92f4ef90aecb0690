"""
Settings navigation tree
Local Session - Training session extension for the course platform

The settings sidebar is an ordered tree of nodes keyed by strings.
Components never own the tree: the host builds it for the current page and
hands it to every registered extender, which may add nodes (optionally
before a named sibling) or hide existing ones.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional
from urllib.parse import urlencode

from django.conf import settings

from .models import Context
from .plugins import get_settings_navigation_extenders

logger = logging.getLogger('core')


class NodeType(IntEnum):
    ROOT = 0
    SYSTEM = 1
    CATEGORY = 10
    COURSE = 20
    CUSTOM = 60
    SETTING = 70
    USER = 80
    CONTAINER = 90


@dataclass(frozen=True)
class PixIcon:
    """
    Icon reference resolved by the theme.

    Attributes:
        name: icon identifier inside the component ('list', 'user-plus'...)
        alt: alternative text
        component: component providing the icon
    """
    name: str
    alt: str = ''
    component: str = 'core'


def build_url(path: str, params: Optional[dict] = None) -> str:
    """Platform URL with an encoded query string."""
    if not params:
        return path
    separator = '&' if '?' in path else '?'
    if path.endswith('?'):
        separator = ''
    return f"{path}{separator}{urlencode(params)}"


@dataclass
class NavigationNode:
    """
    One node of the settings navigation.

    Attributes:
        text: label shown to the user
        key: identifier, unique among siblings by convention only
        node_type: NodeType of the node
        action: target URL ('' for containers)
        shorttext: short label
        icon: optional PixIcon
        display: False once hidden
        children: ordered child nodes
    """
    text: str
    key: str = ''
    node_type: NodeType = NodeType.CUSTOM
    action: str = ''
    shorttext: str = ''
    icon: Optional[PixIcon] = None
    display: bool = True
    children: List['NavigationNode'] = field(default_factory=list)
    parent: Optional['NavigationNode'] = field(default=None, repr=False, compare=False)

    @classmethod
    def create(cls, text, action='', node_type=NodeType.CUSTOM, shorttext='', key='',
               icon=None) -> 'NavigationNode':
        return cls(
            text=str(text),
            key=key,
            node_type=node_type,
            action=action or '',
            shorttext=shorttext,
            icon=icon,
        )

    @property
    def url(self) -> str:
        return self.action or '#'

    def has_children(self) -> bool:
        return len(self.children) > 0

    def add_node(self, node: 'NavigationNode', before_key: Optional[str] = None) -> 'NavigationNode':
        """
        Attach ``node`` as a child, immediately before the child keyed
        ``before_key`` when there is one, at the end otherwise.
        """
        node.parent = self
        position = len(self.children)
        if before_key is not None:
            for index, child in enumerate(self.children):
                if child.key == before_key:
                    position = index
                    break
        self.children.insert(position, node)
        return node

    def add(self, text, action='', node_type=NodeType.SETTING, key='', icon=None,
            before_key=None) -> 'NavigationNode':
        node = NavigationNode.create(text, action, node_type, key=key, icon=icon)
        return self.add_node(node, before_key)

    def get(self, key: str, node_type: Optional[NodeType] = None) -> Optional['NavigationNode']:
        """Direct child with that key (and type, if given)."""
        for child in self.children:
            if child.key == key and (node_type is None or child.node_type == node_type):
                return child
        return None

    def find(self, key: str, node_type: Optional[NodeType] = None) -> Optional['NavigationNode']:
        """Depth-first search, this node included."""
        if self.key == key and (node_type is None or self.node_type == node_type):
            return self
        for child in self.children:
            found = child.find(key, node_type)
            if found is not None:
                return found
        return None

    def hide(self):
        """Keep the node in the tree but stop rendering it."""
        self.display = False

    def get_children_key_list(self) -> List[str]:
        return [child.key for child in self.children]

    def visible_children(self) -> List['NavigationNode']:
        return [child for child in self.children if child.display]


@dataclass
class PageState:
    """
    What the navigation needs to know about the page being rendered.

    Attributes:
        url: full path of the current page (query string included)
        course: course shown by the page, or None
        context: permission context of the page, or None
        user: requesting user
    """
    url: str
    course: Optional[object] = None
    context: Optional[object] = None
    user: Optional[object] = None

    @classmethod
    def from_request(cls, request, course=None, context=None) -> 'PageState':
        if course is None:
            course = getattr(request, 'course', None)
        if context is None and course is not None:
            context = Context.for_course(course)
        return cls(
            url=request.get_full_path(),
            course=course,
            context=context,
            user=getattr(request, 'user', None),
        )

    @property
    def is_site_course(self) -> bool:
        return self.course is not None and self.course.pk == settings.SITE_COURSE_ID


# ========== Course administration defaults ==========

COURSE_ADMIN_DEFAULTS = [
    ('editsettings', 'Settings', '/course/edit.php', 'id'),
    ('users', 'Users', '/enrol/users.php', 'id'),
    ('filtermanagement', 'Filters', '/filter/manage.php', 'contextid'),
    ('coursereports', 'Reports', '/report/view.php', 'courseid'),
    ('gradebooksetup', 'Gradebook setup', '/grade/edit/tree/index.php', 'id'),
    ('coursebadges', 'Badges', '/badges/view.php', 'id'),
    ('import', 'Import', '/backup/import.php', 'id'),
    ('backup', 'Backup', '/backup/backup.php', 'id'),
    ('restore', 'Restore', '/backup/restorefile.php', 'contextid'),
    ('copy', 'Copy course', '/backup/copy.php', 'id'),
    ('reset', 'Reset', '/course/reset.php', 'id'),
    ('questionbank', 'Question bank', '/question/edit.php', 'courseid'),
    ('coursecompletion', 'Course completion', '/course/completion.php', 'id'),
]


def build_course_admin_node(course, context) -> NavigationNode:
    courseadmin = NavigationNode.create(
        'Course administration', node_type=NodeType.COURSE, key='courseadmin'
    )
    for key, text, path, param in COURSE_ADMIN_DEFAULTS:
        value = context.pk if param == 'contextid' else course.pk
        courseadmin.add(text, build_url(path, {param: value}), NodeType.SETTING, key=key)
    return courseadmin


def build_settings_navigation(page: PageState, capabilities) -> NavigationNode:
    """
    Settings sidebar for ``page``.

    The course administration node is only built for a real course whose
    settings the user may update; registered extenders then decorate the
    tree. A failing extender is logged and skipped.
    """
    settingsnav = NavigationNode.create('Settings', node_type=NodeType.ROOT, key='settings')

    if page.course is not None and not page.is_site_course and page.context is not None:
        if capabilities.has_capability('moodle/course:update', page.context):
            settingsnav.add_node(build_course_admin_node(page.course, page.context))

    for extender in get_settings_navigation_extenders():
        try:
            extender(settingsnav, page.context, page=page, capabilities=capabilities)
        except Exception:
            logger.exception(f"Settings navigation extender {extender.__module__}.{extender.__name__} failed")

    return settingsnav
