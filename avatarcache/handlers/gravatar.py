"""Cached Gravatar avatars."""

from __future__ import annotations

from typing import Optional

from typing_extensions import TypedDict

from avatarcache.conf import get_gravatar_rating
from avatarcache.handlers.base import AvatarHandler
from avatarcache.images.types import PNG_IMAGE, get_mimetype
from avatarcache.services.gravatar import GravatarService


class GravatarArgs(TypedDict, total=False):
    """Arguments for :py:meth:`GravatarHandler.get_url`."""

    #: The e-mail address to fetch the Gravatar for.
    email: str

    #: The maximum audience rating.
    rating: str

    #: The MIME type of the Gravatar. Defaults to PNG. Other types are
    #: rejected.
    mimetype: str

    #: Whether to fetch the Gravatar again even if it's cached.
    force: bool


class GravatarHandler(AvatarHandler):
    """Serves Gravatars from the local cache.

    Gravatars are fetched once and then served locally, so visitors never
    contact Gravatar themselves. The Gravatar request uses an MD5 hash of
    the e-mail address, which is separate from the identity hash used for
    the cache path.
    """

    cache_namespace = 'gravatar'

    def __init__(
        self,
        gravatar: Optional[GravatarService] = None,
        **kwargs,
    ) -> None:
        """Initialize the handler.

        Args:
            gravatar (avatarcache.services.gravatar.GravatarService,
                      optional):
                The Gravatar client.

            **kwargs (dict):
                Arguments for :py:class:`~avatarcache.handlers.base.
                AvatarHandler`.
        """
        super().__init__(**kwargs)

        self.gravatar = gravatar or GravatarService()

    def get_url(
        self,
        fallback_url: str,
        hash_value: str,
        size: int,
        args: GravatarArgs,
    ) -> str:
        """Return the URL of a cached Gravatar.

        Args:
            fallback_url (str):
                The URL returned if the Gravatar can't be fetched.

            hash_value (str):
                The identity hash.

            size (int):
                The width and height of the avatar, in pixels.

            args (GravatarArgs):
                The Gravatar arguments.

        Returns:
            str:
            The URL of the cached Gravatar, or ``fallback_url``.

        Raises:
            avatarcache.errors.StorageUnavailableError:
                The cache root could not be created.
        """
        email = args.get('email', '')
        mimetype = args.get('mimetype') or PNG_IMAGE
        filename = self.get_filename(hash_value, size, mimetype)

        if not self.store(filename,
                          lambda: self.gravatar.get_image(
                              email=email,
                              size=size,
                              rating=args.get('rating'),
                              mimetype=mimetype),
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
        """Fetch a Gravatar for a request of a missing file.

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
            ``True`` if the Gravatar is now cached.
        """
        email = self.identities.get_email(hash_value)

        if not email:
            return False

        return bool(self.get_url('', hash_value, size, {
            'email': email,
            'rating': get_gravatar_rating(),
            'mimetype': get_mimetype(extension),
        }))
