"""Selection of the handler for an avatar request."""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any, Mapping, Optional

from avatarcache.cache.filesystem import FilesystemCache
from avatarcache.handlers.base import AvatarHandler, IdentityLookup
from avatarcache.handlers.default_icons import DefaultIconsHandler
from avatarcache.handlers.gravatar import GravatarHandler
from avatarcache.handlers.legacy import LegacyIconHandler
from avatarcache.handlers.user_avatar import UserAvatarHandler
from avatarcache.icons.registry import IconProviderRegistry
from avatarcache.locks import KeyedLock
from avatarcache.services.gravatar import GravatarService
from avatarcache.services.remote_images import RemoteImageService


logger = logging.getLogger(__name__)


#: The format of a cache path, relative to the cache root.
CACHE_PATH_RE = re.compile(
    r'^(?P<type>[\w-]+)/'
    r'(?P<subdir>(?:[\w-]+/)*?)'
    r'(?P<hash>[0-9a-f]+)-(?P<size>\d+)\.(?P<ext>\w+)$')


class AvatarSource(Enum):
    """The kinds of avatar sources."""

    #: A default icon, generated or static.
    DEFAULT_ICON = 'default'

    #: A Gravatar.
    GRAVATAR = 'gravatar'

    #: An image from a legacy avatar URL.
    LEGACY = 'legacy'

    #: An uploaded avatar.
    USER = 'user'


class AvatarHandlers:
    """One handler of each kind, sharing a cache and its locks.

    Build this once at startup and pass it to whatever needs to resolve
    avatars.
    """

    def __init__(
        self,
        cache: Optional[FilesystemCache] = None,
        registry: Optional[IconProviderRegistry] = None,
        identities: Optional[IdentityLookup] = None,
        gravatar: Optional[GravatarService] = None,
        remote_images: Optional[RemoteImageService] = None,
    ) -> None:
        """Initialize the handlers.

        Args:
            cache (avatarcache.cache.filesystem.FilesystemCache, optional):
                The file cache.

            registry (avatarcache.icons.registry.IconProviderRegistry,
                      optional):
                The icon providers.

            identities (avatarcache.handlers.base.IdentityLookup, optional):
                The lookup used when caching images for missing files.

            gravatar (avatarcache.services.gravatar.GravatarService,
                      optional):
                The Gravatar client.

            remote_images (avatarcache.services.remote_images.
                           RemoteImageService, optional):
                The remote image client.
        """
        cache = cache or FilesystemCache()
        remote_images = remote_images or RemoteImageService()
        shared = {
            'cache': cache,
            'locks': KeyedLock(),
            'identities': identities,
        }

        self.cache = cache
        self.default_icons = DefaultIconsHandler(registry=registry,
                                                 remote_images=remote_images,
                                                 **shared)
        self.gravatar = GravatarHandler(gravatar=gravatar, **shared)
        self.legacy = LegacyIconHandler(remote_images=remote_images,
                                        **shared)
        self.user = UserAvatarHandler(**shared)

    def get_handler(
        self,
        source: AvatarSource,
    ) -> AvatarHandler:
        """Return the handler for a kind of source.

        Args:
            source (AvatarSource):
                The kind of source.

        Returns:
            avatarcache.handlers.base.AvatarHandler:
            The handler.
        """
        return {
            AvatarSource.DEFAULT_ICON: self.default_icons,
            AvatarSource.GRAVATAR: self.gravatar,
            AvatarSource.LEGACY: self.legacy,
            AvatarSource.USER: self.user,
        }[source]

    def get_handler_for_type(
        self,
        icon_type: str,
    ) -> AvatarHandler:
        """Return the handler owning the first component of a cache path.

        Args:
            icon_type (str):
                The cache namespace.

        Returns:
            avatarcache.handlers.base.AvatarHandler:
            The handler. Unknown namespaces belong to the default icons.
        """
        for handler in (self.gravatar, self.legacy, self.user):
            if handler.cache_namespace == icon_type:
                return handler

        return self.default_icons


def get_avatar_url(
    handlers: AvatarHandlers,
    source: AvatarSource,
    fallback_url: str,
    hash_value: str,
    size: int,
    args: Mapping[str, Any],
) -> str:
    """Return the URL of an avatar.

    Args:
        handlers (AvatarHandlers):
            The handlers.

        source (AvatarSource):
            The kind of avatar source.

        fallback_url (str):
            The URL returned if the avatar can't be provided.

        hash_value (str):
            The identity hash.

        size (int):
            The width and height of the avatar, in pixels.

        args (dict):
            The arguments for the source's handler.

    Returns:
        str:
        The avatar URL, or ``fallback_url``.

    Raises:
        avatarcache.errors.StorageUnavailableError:
            The cache root could not be created.
    """
    return handlers.get_handler(source).get_url(fallback_url, hash_value,
                                                size, args)


def cache_image_for_path(
    handlers: AvatarHandlers,
    relative_path: str,
) -> bool:
    """Populate the cache file for a path that was requested but missing.

    Args:
        handlers (AvatarHandlers):
            The handlers.

        relative_path (str):
            The requested path, relative to the cache root.

    Returns:
        bool:
        ``True`` if the file is now cached.

    Raises:
        avatarcache.errors.StorageUnavailableError:
            The cache root could not be created.
    """
    m = CACHE_PATH_RE.match(relative_path.lstrip('/'))

    if not m:
        logger.debug('Ignoring request for invalid cache path "%s"',
                     relative_path)
        return False

    icon_type = m.group('type')
    handler = handlers.get_handler_for_type(icon_type)

    return handler.cache_image(icon_type=icon_type,
                               hash_value=m.group('hash'),
                               size=int(m.group('size')),
                               subdir=m.group('subdir').rstrip('/'),
                               extension=m.group('ext'))
