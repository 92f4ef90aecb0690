"""
Extension hook registry
Local Session - Training session extension for the course platform

Components plug into the platform from their AppConfig.ready():
    register_pluginfile_callback('local_session', session_pluginfile)
    register_settings_navigation_extender(extend_settings_navigation)
"""

import logging

logger = logging.getLogger('core')

_pluginfile_callbacks = {}
_settings_navigation_extenders = []


def register_pluginfile_callback(component, callback):
    """Serve files of ``component`` through ``callback``."""
    _pluginfile_callbacks[component] = callback
    logger.debug(f"pluginfile callback registered for {component}")


def get_pluginfile_callback(component):
    return _pluginfile_callbacks.get(component)


def register_settings_navigation_extender(extender):
    """Registering the same function twice has no effect."""
    if extender not in _settings_navigation_extenders:
        _settings_navigation_extenders.append(extender)
        logger.debug(f"Settings navigation extender registered: {extender.__module__}.{extender.__name__}")


def get_settings_navigation_extenders():
    return list(_settings_navigation_extenders)
