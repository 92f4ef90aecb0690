from django.apps import AppConfig


class SessionConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.session'
    label = 'local_session'
    verbose_name = 'Session course navigation'

    def ready(self):
        """Plug the session hooks into the platform"""
        from apps.core.plugins import (
            register_pluginfile_callback,
            register_settings_navigation_extender,
        )
        from .lib import COMPONENT, session_pluginfile, extend_settings_navigation

        register_pluginfile_callback(COMPONENT, session_pluginfile)
        register_settings_navigation_extender(extend_settings_navigation)
