"""Default icon avatars."""

from __future__ import annotations

from typing import Optional

from typing_extensions import TypedDict

from avatarcache.handlers.base import AvatarHandler
from avatarcache.icons.providers import IconProvider
from avatarcache.icons.registry import IconProviderRegistry
from avatarcache.services.remote_images import RemoteImageService


class DefaultIconArgs(TypedDict, total=False):
    """Arguments for :py:meth:`DefaultIconsHandler.get_url`."""

    #: The default icon type, or the URL of a local image.
    default: str

    #: Whether to regenerate a cached icon.
    force: bool


class DefaultIconsHandler(AvatarHandler):
    """Provides default icons through the icon provider registry.

    Generated icons are stored under their provider's cache directory.
    Static icons are served directly.
    """

    def __init__(
        self,
        registry: Optional[IconProviderRegistry] = None,
        remote_images: Optional[RemoteImageService] = None,
        **kwargs,
    ) -> None:
        """Initialize the handler.

        Args:
            registry (avatarcache.icons.registry.IconProviderRegistry,
                      optional):
                The icon providers. Defaults to the built-in ones.

            remote_images (avatarcache.services.remote_images.
                           RemoteImageService, optional):
                The service used to validate image URLs passed as the
                default.

            **kwargs (dict):
                Arguments for :py:class:`~avatarcache.handlers.base.
                AvatarHandler`.
        """
        super().__init__(**kwargs)

        if registry is None:
            registry = IconProviderRegistry()

        self.registry = registry
        self.remote_images = remote_images or RemoteImageService()

    def get_url(
        self,
        fallback_url: str,
        hash_value: str,
        size: int,
        args: DefaultIconArgs,
    ) -> str:
        """Return the URL of a default icon.

        If ``args['default']`` isn't a known icon type but is a valid local
        image URL, it's returned as-is.

        Args:
            fallback_url (str):
                The URL returned if no icon can be provided.

            hash_value (str):
                The identity hash.

            size (int):
                The width and height of the icon, in pixels.

            args (DefaultIconArgs):
                The icon arguments.

        Returns:
            str:
            The icon URL, or ``fallback_url``.

        Raises:
            avatarcache.errors.StorageUnavailableError:
                The cache root could not be created.
        """
        icon_type = args.get('default', '')
        provider = self.registry.resolve(icon_type)

        if provider is not None:
            return self.get_provider_url(provider, fallback_url, hash_value,
                                         size,
                                         force=args.get('force', False))

        if icon_type and self.remote_images.validate_image_url(icon_type,
                                                               'default'):
            return icon_type

        return fallback_url

    def get_provider_url(
        self,
        provider: IconProvider,
        fallback_url: str,
        hash_value: str,
        size: int,
        force: bool = False,
    ) -> str:
        """Return the URL of an icon from a provider.

        Args:
            provider (avatarcache.icons.providers.IconProvider):
                The provider.

            fallback_url (str):
                The URL returned if the icon can't be provided.

            hash_value (str):
                The identity hash.

            size (int):
                The width and height of the icon, in pixels.

            force (bool, optional):
                Whether to regenerate a cached icon.

        Returns:
            str:
            The icon URL. If generation fails, this is the provider's static
            image or ``fallback_url``.
        """
        if provider.is_static:
            return provider.get_static_url() or fallback_url

        filename = provider.get_filename(hash_value, size)

        if self.store(filename,
                      lambda: provider.build(hash_value, size),
                      force=force):
            return self.cache.get_url(filename)

        return provider.get_static_url() or fallback_url

    def cache_image(
        self,
        icon_type: str,
        hash_value: str,
        size: int,
        subdir: str,
        extension: str,
    ) -> bool:
        """Generate a default icon for a request of a missing file.

        Args:
            icon_type (str):
                The icon type.

            hash_value (str):
                The identity hash.

            size (int):
                The width and height of the icon, in pixels.

            subdir (str):
                Unused.

            extension (str):
                Unused. The provider determines the file type.

        Returns:
            bool:
            ``True`` if an icon URL could be determined.
        """
        return bool(self.get_url('', hash_value, size, {
            'default': icon_type,
        }))
