"""
Core model registration in the Django admin
Local Session - Training session extension for the course platform
"""

from django.contrib import admin

from .models import Context, StoredFile


@admin.register(Context)
class ContextAdmin(admin.ModelAdmin):
    list_display = ['id', 'level', 'instance_id']
    list_filter = ['level']
    search_fields = ['instance_id']


@admin.register(StoredFile)
class StoredFileAdmin(admin.ModelAdmin):
    list_display = ['fullpath', 'component', 'filearea', 'is_directory', 'filesize_preview', 'updated_at']
    list_filter = ['component', 'filearea', 'is_directory']
    search_fields = ['filepath', 'filename', 'pathnamehash']
    readonly_fields = ['pathnamehash', 'created_at', 'updated_at']

    def filesize_preview(self, obj):
        if obj.is_directory:
            return '-'
        return f"{obj.filesize / 1024:.1f} KB" if obj.filesize >= 1024 else f"{obj.filesize} B"
    filesize_preview.short_description = 'Size'
