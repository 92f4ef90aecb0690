"""
Session pages
Local Session - Training session extension for the course platform
"""

from django.contrib.auth.mixins import LoginRequiredMixin, PermissionRequiredMixin
from django.views.generic import DetailView

from .models import Session


class SessionSheetView(LoginRequiredMixin, PermissionRequiredMixin, DetailView):
    """Session sheet"""
    model = Session
    permission_required = 'trainings.change_session'
    template_name = 'trainings/session_sheet.html'
    context_object_name = 'session'

    def get_queryset(self):
        return Session.objects.select_related('course', 'training')

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['returnto'] = self.request.GET.get('returnto', '')
        return context
