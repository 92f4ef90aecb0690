"""
Template tags for the settings navigation
Local Session - Training session extension for the course platform

Usage in templates:
    {% load navigation %}

    {% render_settings_navigation settingsnav %}
"""

from django import template

register = template.Library()


@register.inclusion_tag('core/settings_navigation.html', takes_context=True)
def render_settings_navigation(context, node=None):
    """
    Render the visible part of the settings tree.
    Hidden nodes are skipped together with their children.
    """
    if node is None:
        node = context.get('settingsnav')
    request = context.get('request')
    current_path = request.path if request else ''

    return {
        'node': node,
        'children': node.visible_children() if node is not None else [],
        'current_path': current_path,
        'request': request,
    }


@register.filter
def is_active_node(node, current_path):
    """{% if child|is_active_node:current_path %}...{% endif %}"""
    if not node.action or not current_path:
        return False
    return node.action.split('?', 1)[0] == current_path
