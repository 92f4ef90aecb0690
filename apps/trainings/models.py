"""
Training and session models
Local Session - Training session extension for the course platform

=== Architecture ===
- Training: course template a session is an instance of
- Session: scheduled instance of a training, bound to its own course,
  with a lifecycle status
"""

from django.db import models
from django.urls import reverse

from apps.core.models import Context
from apps.core.navigation import build_url


class Training(models.Model):
    """
    Training template
    """
    name = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Name'
    )
    courseshortname = models.CharField(
        max_length=255,
        verbose_name='Course short name'
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Created at'
    )

    class Meta:
        db_table = 'training'
        verbose_name = 'Training'
        verbose_name_plural = 'Trainings'

    def __str__(self):
        return self.name or self.courseshortname


class Session(models.Model):
    """
    Session of a training, attached to one course.
    """
    STATUS_IN_PREPARATION = 'inpreparation'
    STATUS_OPENED_REGISTRATION = 'openedregistration'
    STATUS_IN_PROGRESS = 'inprogress'
    STATUS_COMPLETED = 'completed'
    STATUS_ARCHIVED = 'archived'
    STATUS_REPORTED = 'reported'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_IN_PREPARATION, 'In preparation'),
        (STATUS_OPENED_REGISTRATION, 'Registration open'),
        (STATUS_IN_PROGRESS, 'In progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_ARCHIVED, 'Archived'),
        (STATUS_REPORTED, 'Reported'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    # No more enrolments once a session reached one of these
    CLOSED_STATUSES = (STATUS_ARCHIVED, STATUS_COMPLETED, STATUS_CANCELLED)

    course = models.OneToOneField(
        'courses.Course',
        on_delete=models.CASCADE,
        related_name='session',
        verbose_name='Course'
    )
    training = models.ForeignKey(
        Training,
        on_delete=models.CASCADE,
        related_name='sessions',
        verbose_name='Training'
    )
    courseshortname = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Course short name'
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_IN_PREPARATION,
        verbose_name='Status'
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Created at'
    )

    class Meta:
        db_table = 'session'
        verbose_name = 'Session'
        verbose_name_plural = 'Sessions'
        permissions = [
            ('import_users', 'Can import users into a session from a CSV file'),
            ('duplicate_session_into_training', 'Can duplicate a session into a training'),
        ]

    def __str__(self):
        return self.courseshortname or f"Session #{self.pk}"

    def save(self, *args, **kwargs):
        if not self.courseshortname:
            self.courseshortname = self.course.shortname
        super().save(*args, **kwargs)

    @property
    def is_closed(self):
        return self.status in self.CLOSED_STATUSES

    def get_course(self):
        return self.course

    def get_context(self):
        return Context.for_course(self.course_id)

    def get_sheet_url(self, returnto=None):
        """Session sheet, optionally sending the user back to ``returnto``."""
        url = reverse('trainings:session_sheet', kwargs={'pk': self.pk})
        if returnto:
            url = build_url(url, {'returnto': returnto})
        return url
