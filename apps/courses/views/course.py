"""
Course pages
Local Session - Training session extension for the course platform

Both pages render the settings sidebar: the course page and the course
administration page. The sidebar content depends on the page URL, see
apps.session.lib.extend_settings_navigation.
"""

from django.contrib.auth.mixins import LoginRequiredMixin
from django.shortcuts import get_object_or_404
from django.views.generic import TemplateView

from ..models import Course


class CoursePageMixin(LoginRequiredMixin):
    """Expose the course of the URL as ``request.course``."""

    def dispatch(self, request, *args, **kwargs):
        self.course = get_object_or_404(Course, pk=kwargs['course_id'])
        request.course = self.course
        return super().dispatch(request, *args, **kwargs)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['course'] = self.course
        return context


class CourseView(CoursePageMixin, TemplateView):
    """Course home page"""
    template_name = 'courses/course_view.html'


class CourseAdminView(CoursePageMixin, TemplateView):
    """Course administration page"""
    template_name = 'courses/course_admin.html'
