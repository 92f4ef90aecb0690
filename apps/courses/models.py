"""
Course model
Local Session - Training session extension for the course platform
"""

from django.db import models


class Course(models.Model):
    """
    A course of the platform.
    The course whose id is settings.SITE_COURSE_ID is the front page
    pseudo-course.
    """
    shortname = models.CharField(
        max_length=255,
        unique=True,
        verbose_name='Short name'
    )
    fullname = models.CharField(
        max_length=255,
        verbose_name='Full name'
    )
    category = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Category'
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Created at'
    )

    class Meta:
        db_table = 'courses'
        verbose_name = 'Course'
        verbose_name_plural = 'Courses'
        ordering = ['shortname']
        permissions = [
            ('view_participants', 'Can view course participants'),
            ('manage_groups', 'Can manage course groups'),
            ('access_contentbank', 'Can access the content bank'),
            ('view_all_grades', 'Can view all grades'),
            ('view_grader_report', 'Can view the grader report'),
            ('view_outline_report', 'Can view the activity outline report'),
            ('view_completion_report', 'Can view the course completion report'),
            ('view_progress_report', 'Can view the activity completion report'),
        ]

    def __str__(self):
        return self.fullname or self.shortname
