"""
pluginfile dispatcher - delivery of component files
Local Session - Training session extension for the course platform

URL shape:
    /pluginfile/<contextid>/<component>/<filearea>/<relative path>

The dispatcher only resolves the context and hands over to the callback the
component registered; a callback returning False means "not found".
"""

import logging

from django.conf import settings
from django.http import Http404
from django.shortcuts import get_object_or_404
from django.views import View

from apps.courses.models import Course

from .models import Context
from .plugins import get_pluginfile_callback

logger = logging.getLogger('core')


class PluginFileView(View):
    """
    Serve a file stored by a component.
    """

    def get(self, request, contextid, component, filearea, relativepath):
        context = get_object_or_404(Context, pk=contextid)

        callback = get_pluginfile_callback(component)
        if callback is None:
            raise Http404("Unknown component.")

        course = None
        if context.is_course:
            course = Course.objects.filter(pk=context.instance_id).first()

        args = [segment for segment in relativepath.split('/') if segment]
        forcedownload = request.GET.get('forcedownload', '') in ('1', 'true')
        options = dict(settings.PLUGINFILE_OPTIONS)

        response = callback(request, course, None, context, filearea, args, forcedownload, options)
        if response is False or response is None:
            logger.info(
                f"File refused: /{contextid}/{component}/{filearea}/{relativepath}"
            )
            raise Http404("File not found.")

        return response
