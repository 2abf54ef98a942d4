"""Resized copies of uploaded avatars."""

from __future__ import annotations

from typing_extensions import TypedDict

from avatarcache.handlers.base import AvatarHandler
from avatarcache.images.editor import get_resized_image_data, open_image
from avatarcache.images.types import PNG_IMAGE


class UserAvatarArgs(TypedDict, total=False):
    """Arguments for :py:meth:`UserAvatarHandler.get_url`."""

    #: The path of the uploaded image.
    avatar: str

    #: The MIME type of the uploaded image, also used for the cached copy.
    mimetype: str

    #: Whether to resize the image again even if it's cached.
    force: bool

    #: Whether to append the cached file's modification time to the URL.
    timestamp: bool


class UserAvatarHandler(AvatarHandler):
    """Serves uploaded avatars, cropped and resized to the requested size."""

    cache_namespace = 'user'

    def get_url(
        self,
        fallback_url: str,
        hash_value: str,
        size: int,
        args: UserAvatarArgs,
    ) -> str:
        """Return the URL of a resized uploaded avatar.

        Args:
            fallback_url (str):
                The URL returned if the avatar can't be resized.

            hash_value (str):
                The identity hash.

            size (int):
                The width and height of the avatar, in pixels.

            args (UserAvatarArgs):
                The uploaded avatar arguments.

        Returns:
            str:
            The URL of the resized avatar, or ``fallback_url``.

        Raises:
            avatarcache.errors.StorageUnavailableError:
                The cache root could not be created.
        """
        path = args.get('avatar', '')
        mimetype = args.get('mimetype') or PNG_IMAGE
        filename = self.get_filename(hash_value, size, mimetype)

        if not path:
            return fallback_url

        if not self.store(filename,
                          lambda: get_resized_image_data(open_image(path),
                                                         size, size,
                                                         mimetype,
                                                         crop=True),
                          force=args.get('force', False)):
            return fallback_url

        url = self.cache.get_url(filename)

        if args.get('timestamp'):
            mtime = self.cache.get_mtime(filename)

            if mtime is not None:
                url = '%s?ts=%d' % (url, mtime)

        return url

    def cache_image(
        self,
        icon_type: str,
        hash_value: str,
        size: int,
        subdir: str,
        extension: str,
    ) -> bool:
        """Resize an uploaded avatar for a request of a missing file.

        Args:
            icon_type (str):
                Unused.

            hash_value (str):
                The identity hash.

            size (int):
                The width and height of the avatar, in pixels.

            subdir (str):
                Unused.

            extension (str):
                Unused. The uploaded image's type is kept.

        Returns:
            bool:
            ``True`` if the avatar is now cached.
        """
        avatar = self.identities.get_uploaded_avatar(hash_value)

        if not avatar:
            return False

        path, mimetype = avatar

        return bool(self.get_url('', hash_value, size, {
            'avatar': path,
            'mimetype': mimetype,
        }))
