"""Cached copies of legacy avatar URLs."""

from __future__ import annotations

import os
from typing import Optional
from urllib.parse import urlsplit

from typing_extensions import TypedDict

from avatarcache.handlers.base import AvatarHandler
from avatarcache.images.types import get_mimetype
from avatarcache.services.remote_images import RemoteImageService


class LegacyArgs(TypedDict, total=False):
    """Arguments for :py:meth:`LegacyIconHandler.get_url`."""

    #: The source image URL. Defaults to the fallback URL.
    url: str

    #: The MIME type to store. Defaults to the type matching the URL's
    #: extension.
    mimetype: str

    #: Whether to fetch the image again even if it's cached.
    force: bool


class LegacyIconHandler(AvatarHandler):
    """Serves local, resized copies of arbitrary avatar image URLs."""

    cache_namespace = 'legacy'

    def __init__(
        self,
        remote_images: Optional[RemoteImageService] = None,
        **kwargs,
    ) -> None:
        """Initialize the handler.

        Args:
            remote_images (avatarcache.services.remote_images.
                           RemoteImageService, optional):
                The service used to validate and fetch the images.

            **kwargs (dict):
                Arguments for :py:class:`~avatarcache.handlers.base.
                AvatarHandler`.
        """
        super().__init__(**kwargs)

        self.remote_images = remote_images or RemoteImageService()

    def get_target_mimetype(
        self,
        url: str,
    ) -> str:
        """Return the MIME type to store an image URL as.

        Args:
            url (str):
                The image URL.

        Returns:
            str:
            The MIME type matching the URL's extension, or ``image/png``.
        """
        return get_mimetype(os.path.splitext(urlsplit(url).path)[1])

    def get_url(
        self,
        fallback_url: str,
        hash_value: str,
        size: int,
        args: LegacyArgs,
    ) -> str:
        """Return the URL of a cached copy of a legacy image.

        Args:
            fallback_url (str):
                The URL returned if the image can't be fetched. This is also
                the source URL if ``args['url']`` isn't set.

            hash_value (str):
                The identity hash.

            size (int):
                The width and height of the avatar, in pixels.

            args (LegacyArgs):
                The legacy image arguments.

        Returns:
            str:
            The URL of the cached copy, or ``fallback_url``.

        Raises:
            avatarcache.errors.StorageUnavailableError:
                The cache root could not be created.
        """
        url = args.get('url') or fallback_url

        if not self.remote_images.validate_image_url(url, 'legacy'):
            return fallback_url

        mimetype = args.get('mimetype') or self.get_target_mimetype(url)
        filename = self.get_filename(hash_value, size, mimetype)

        if not self.store(filename,
                          lambda: self.remote_images.get_image(url, size,
                                                               mimetype),
                          force=args.get('force', False)):
            return fallback_url

        return self.cache.get_url(filename)

    def cache_image(
        self,
        icon_type: str,
        hash_value: str,
        size: int,
        subdir: str,
        extension: str,
    ) -> bool:
        """Fetch a legacy image for a request of a missing file.

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
                The requested file extension.

        Returns:
            bool:
            ``True`` if the image is now cached.
        """
        url = self.identities.get_legacy_url(hash_value)

        if not url:
            return False

        return bool(self.get_url('', hash_value, size, {
            'url': url,
            'mimetype': get_mimetype(extension),
        }))
