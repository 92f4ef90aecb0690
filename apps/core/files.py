"""
File store service - lookup and delivery of stored files
Local Session - Training session extension for the course platform

Components address their files by composing a path and hashing it:
    /{contextid}/{component}/{filearea}/{relative path}
The store never exposes anything else than the lookup by hash.
"""

import logging
import mimetypes

from django.core.files.base import ContentFile
from django.http import FileResponse
from django.utils.encoding import smart_str

from .models import StoredFile, compute_pathname_hash

logger = logging.getLogger('core')


class FileStorage:
    """
    Service layer over StoredFile.
    """

    @staticmethod
    def get_pathname_hash(context_id, component, filearea, filepath):
        return compute_pathname_hash(context_id, component, filearea, filepath)

    @classmethod
    def get_file_by_hash(cls, pathnamehash):
        """
        Stored file whose composed path hashes to ``pathnamehash``.

        Returns:
            StoredFile or None
        """
        return StoredFile.objects.filter(pathnamehash=pathnamehash).first()

    @classmethod
    def create_file_from_string(cls, context, component, filearea, filepath, content,
                                mimetype=''):
        """Store ``content`` (str or bytes) under the given path."""
        if isinstance(content, str):
            content = content.encode('utf-8')

        stored = StoredFile(
            context=context,
            component=component,
            filearea=filearea,
            filepath=filepath,
            mimetype=mimetype or mimetypes.guess_type(filepath)[0] or '',
            filesize=len(content),
        )
        # upload_to needs the hash before the content is written
        stored.pathnamehash = compute_pathname_hash(context.pk, component, filearea, filepath)
        stored.content.save(stored.pathnamehash, ContentFile(content), save=False)
        stored.save()
        logger.debug(f"Stored file created: {stored.fullpath}")
        return stored

    @classmethod
    def create_directory(cls, context, component, filearea, filepath):
        """Directory entry; directories carry no content."""
        if not filepath.endswith('/'):
            filepath = f"{filepath}/"
        stored = StoredFile(
            context=context,
            component=component,
            filearea=filearea,
            filepath=filepath,
            is_directory=True,
        )
        stored.save()
        return stored


def send_stored_file(stored_file, lifetime=0, forcedownload=False, options=None):
    """
    Stream a stored file to the client.

    Args:
        stored_file: StoredFile (never a directory)
        lifetime: cache lifetime in seconds, overridden by options['lifetime']
        forcedownload: serve as attachment instead of inline
        options: transfer options (lifetime, cacheability, filename)

    Returns:
        FileResponse
    """
    options = options or {}
    lifetime = int(options.get('lifetime', lifetime) or 0)
    cacheability = options.get('cacheability', 'private')
    filename = options.get('filename') or stored_file.filename

    content_type = stored_file.mimetype
    if not content_type:
        content_type, _ = mimetypes.guess_type(filename)
    content_type = content_type or 'application/octet-stream'

    stored_file.content.open('rb')
    response = FileResponse(
        stored_file.content,
        content_type=content_type,
    )
    response['Content-Length'] = stored_file.filesize
    response['Accept-Ranges'] = 'bytes'

    disposition = 'attachment' if forcedownload else 'inline'
    response['Content-Disposition'] = f'{disposition}; filename="{smart_str(filename)}"'

    if lifetime > 0:
        response['Cache-Control'] = f'{cacheability}, max-age={lifetime}'
    else:
        response['Cache-Control'] = 'no-cache'

    return response
