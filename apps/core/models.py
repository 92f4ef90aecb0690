"""
Core platform models
Local Session - Training session extension for the course platform

=== Architecture ===
- Context: permission scope bound to a course, a category, a module...
- StoredFile: generic file store row, addressed by the SHA-1 of its
  composed path (/contextid/component/filearea/filepath)
"""

import hashlib

from django.db import models


class ContextLevel(models.IntegerChoices):
    SYSTEM = 10, 'System'
    USER = 30, 'User'
    COURSECAT = 40, 'Course category'
    COURSE = 50, 'Course'
    MODULE = 70, 'Activity module'
    BLOCK = 80, 'Block'


class Context(models.Model):
    """
    Permission scope of an object of the platform.
    A course context is identified by (COURSE, course id).
    """
    level = models.PositiveSmallIntegerField(
        choices=ContextLevel.choices,
        verbose_name='Context level'
    )
    instance_id = models.PositiveIntegerField(
        default=0,
        verbose_name='Instance id'
    )

    class Meta:
        db_table = 'contexts'
        verbose_name = 'Context'
        verbose_name_plural = 'Contexts'
        unique_together = ('level', 'instance_id')

    def __str__(self):
        return f"{self.get_level_display()} #{self.instance_id}"

    @property
    def is_course(self):
        return self.level == ContextLevel.COURSE

    @classmethod
    def for_course(cls, course):
        """Course context, created on first use."""
        course_id = getattr(course, 'pk', course)
        context, _ = cls.objects.get_or_create(
            level=ContextLevel.COURSE, instance_id=course_id
        )
        return context


def stored_file_upload_to(instance, filename):
    return f"filestore/{instance.pathnamehash[:2]}/{instance.pathnamehash}"


def compute_pathname_hash(context_id, component, filearea, filepath):
    """SHA-1 hex digest of the composed path of a stored file."""
    fullpath = f"/{context_id}/{component}/{filearea}/{filepath}"
    return hashlib.sha1(fullpath.encode('utf-8')).hexdigest()


class StoredFile(models.Model):
    """
    A file (or directory entry) kept by the generic file store.
    Components never query this table directly: they compose a path and
    go through FileStorage.get_file_by_hash().
    """
    context = models.ForeignKey(
        Context,
        on_delete=models.CASCADE,
        related_name='files',
        verbose_name='Context'
    )
    component = models.CharField(
        max_length=100,
        verbose_name='Component'
    )
    filearea = models.CharField(
        max_length=50,
        verbose_name='File area'
    )
    filepath = models.CharField(
        max_length=255,
        help_text='Path relative to the file area, e.g. "2023/report.pdf"',
        verbose_name='Relative path'
    )
    filename = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='File name'
    )
    is_directory = models.BooleanField(
        default=False,
        verbose_name='Directory'
    )
    mimetype = models.CharField(
        max_length=100,
        blank=True,
        verbose_name='MIME type'
    )
    filesize = models.PositiveBigIntegerField(
        default=0,
        verbose_name='Size (bytes)'
    )
    content = models.FileField(
        upload_to=stored_file_upload_to,
        blank=True,
        verbose_name='Content'
    )
    pathnamehash = models.CharField(
        max_length=40,
        unique=True,
        editable=False,
        verbose_name='Path hash'
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Created at'
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Updated at'
    )

    class Meta:
        db_table = 'stored_files'
        verbose_name = 'Stored file'
        verbose_name_plural = 'Stored files'
        indexes = [
            models.Index(fields=['context', 'component', 'filearea'], name='idx_files_area'),
        ]

    def __str__(self):
        return self.fullpath

    @property
    def fullpath(self):
        return f"/{self.context_id}/{self.component}/{self.filearea}/{self.filepath}"

    def save(self, *args, **kwargs):
        self.pathnamehash = compute_pathname_hash(
            self.context_id, self.component, self.filearea, self.filepath
        )
        if not self.filename:
            self.filename = self.filepath.rstrip('/').rsplit('/', 1)[-1]
        super().save(*args, **kwargs)
