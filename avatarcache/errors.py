"""Exception classes for avatar generation and caching."""

from __future__ import annotations


class AvatarCacheError(Exception):
    """Base class for avatarcache errors."""


class StorageUnavailableError(AvatarCacheError):
    """The cache root directory could not be created or accessed.

    This is the only error that handlers let escape to callers.
    """


class GenerationFailedError(AvatarCacheError):
    """A generator could not produce image data."""


class PartFilesNotFoundError(GenerationFailedError):
    """The part files needed by a composite generator are missing."""


class FetchFailedError(AvatarCacheError):
    """A remote image could not be retrieved."""


class InvalidMimeTypeError(FetchFailedError):
    """A remote response was not one of the accepted image types."""

    def __init__(
        self,
        mimetype: str,
    ) -> None:
        """Initialize the error.

        Args:
            mimetype (str):
                The MIME type that was received.
        """
        super().__init__('Unexpected MIME type "%s".' % mimetype)

        self.mimetype = mimetype


class CacheWriteFailedError(AvatarCacheError):
    """Image data could not be written to the cache."""


class InvalidSourceURLError(AvatarCacheError):
    """A source image URL failed validation."""


class ItemLookupError(AvatarCacheError):
    """An item could not be found in a registry."""


class AlreadyRegisteredError(AvatarCacheError):
    """An item, or one of its lookup values, is already registered."""


class IconProviderNotFoundError(ItemLookupError):
    """No icon provider handles the requested type."""
