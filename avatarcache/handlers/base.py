"""Base support for avatar handlers."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Tuple

from django.core.exceptions import SuspiciousFileOperation
from typing_extensions import Protocol

from avatarcache.cache.filesystem import FilesystemCache, get_shard
from avatarcache.images.types import get_extension
from avatarcache.locks import KeyedLock


logger = logging.getLogger(__name__)


class IdentityLookup(Protocol):
    """Maps identity hashes back to their avatar sources.

    Handlers use this to rebuild a cache entry when all they know is the
    hash, such as when a request comes in for a missing cache file.
    Identity storage is up to the site.
    """

    def get_email(
        self,
        hash_value: str,
    ) -> Optional[str]:
        """Return the e-mail address for a hash.

        Args:
            hash_value (str):
                The identity hash.

        Returns:
            str:
            The e-mail address, or ``None`` if unknown.
        """
        ...

    def get_legacy_url(
        self,
        hash_value: str,
    ) -> Optional[str]:
        """Return the legacy image URL for a hash.

        Args:
            hash_value (str):
                The identity hash.

        Returns:
            str:
            The URL, or ``None`` if unknown.
        """
        ...

    def get_uploaded_avatar(
        self,
        hash_value: str,
    ) -> Optional[Tuple[str, str]]:
        """Return the uploaded avatar for a hash.

        Args:
            hash_value (str):
                The identity hash.

        Returns:
            tuple:
            A 2-tuple of the file path and its MIME type, or ``None`` if the
            identity has no uploaded avatar.
        """
        ...


class NullIdentityLookup:
    """An identity lookup that knows no identities."""

    def get_email(
        self,
        hash_value: str,
    ) -> Optional[str]:
        return None

    def get_legacy_url(
        self,
        hash_value: str,
    ) -> Optional[str]:
        return None

    def get_uploaded_avatar(
        self,
        hash_value: str,
    ) -> Optional[Tuple[str, str]]:
        return None


class AvatarHandler:
    """Base class for avatar handlers.

    A handler computes the cache path for a request, produces the image on
    a cache miss, stores it, and returns the public URL of the cached file.
    Every failure apart from an unusable cache root results in the
    caller's fallback URL.

    Subclasses must set :py:attr:`cache_namespace` and implement
    :py:meth:`get_url` and :py:meth:`cache_image`.
    """

    #: The top-level cache directory for this handler's files.
    cache_namespace: str = ''

    def __init__(
        self,
        cache: Optional[FilesystemCache] = None,
        locks: Optional[KeyedLock] = None,
        identities: Optional[IdentityLookup] = None,
    ) -> None:
        """Initialize the handler.

        Args:
            cache (avatarcache.cache.filesystem.FilesystemCache, optional):
                The file cache. Defaults to one using the configured root.

            locks (avatarcache.locks.KeyedLock, optional):
                The locks used to avoid producing the same file twice at
                once. Handlers sharing a cache should share these.

            identities (IdentityLookup, optional):
                The lookup used by :py:meth:`cache_image`.
        """
        # KeyedLock is falsy while no key is held.
        if locks is None:
            locks = KeyedLock()

        self.cache = cache or FilesystemCache()
        self.locks = locks
        self.identities = identities or NullIdentityLookup()

    def get_url(
        self,
        fallback_url: str,
        hash_value: str,
        size: int,
        args: Mapping[str, Any],
    ) -> str:
        """Return the URL of an avatar, caching it if needed.

        Args:
            fallback_url (str):
                The URL returned if the avatar can't be provided.

            hash_value (str):
                The identity hash.

            size (int):
                The width and height of the avatar, in pixels.

            args (dict):
                Handler-specific arguments.

        Returns:
            str:
            The avatar URL, or ``fallback_url``.

        Raises:
            avatarcache.errors.StorageUnavailableError:
                The cache root could not be created.
        """
        raise NotImplementedError('%r must implement get_url()'
                                  % type(self).__name__)

    def cache_image(
        self,
        icon_type: str,
        hash_value: str,
        size: int,
        subdir: str,
        extension: str,
    ) -> bool:
        """Populate a cache file for a request of a missing file.

        Args:
            icon_type (str):
                The first component of the requested path.

            hash_value (str):
                The identity hash.

            size (int):
                The width and height of the avatar, in pixels.

            subdir (str):
                The path components between the type and the file name.

            extension (str):
                The requested file extension.

        Returns:
            bool:
            ``True`` if the image is now available.

        Raises:
            avatarcache.errors.StorageUnavailableError:
                The cache root could not be created.
        """
        raise NotImplementedError('%r must implement cache_image()'
                                  % type(self).__name__)

    def get_filename(
        self,
        hash_value: str,
        size: int,
        mimetype: str,
    ) -> str:
        """Return the cache path for an avatar.

        Args:
            hash_value (str):
                The identity hash.

            size (int):
                The width and height of the avatar, in pixels.

            mimetype (str):
                The MIME type of the cached image.

        Returns:
            str:
            The path, relative to the cache root.
        """
        return '%s/%s/%s-%d.%s' % (self.cache_namespace,
                                   get_shard(hash_value),
                                   hash_value,
                                   size,
                                   get_extension(mimetype))

    def store(
        self,
        filename: str,
        produce: Callable[[], bytes],
        force: bool = False,
    ) -> bool:
        """Make sure a file is in the cache, producing it if needed.

        Only one thread at a time produces a given file. Threads that
        waited find the file already cached and return right away.

        Args:
            filename (str):
                The path relative to the cache root.

            produce (callable):
                A function returning the image data. Empty data means the
                image couldn't be produced.

            force (bool, optional):
                Whether to replace an existing file.

        Returns:
            bool:
            ``True`` if the file is in the cache.

        Raises:
            avatarcache.errors.StorageUnavailableError:
                The cache root could not be created.
        """
        cache = self.cache

        try:
            if not force and cache.exists(filename):
                return True

            with self.locks.hold(filename):
                if not force and cache.exists(filename):
                    return True

                data = produce()

                if not data:
                    logger.debug('No image data was produced for "%s"',
                                 filename)
                    return False

                return cache.set(filename, data, force=force)
        except SuspiciousFileOperation as e:
            logger.error('Refusing to cache "%s": %s', filename, e)
            return False
