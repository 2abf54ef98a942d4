"""Icon providers.

A provider binds one or more default icon type names to either a
:py:class:`~avatarcache.icons.generators.base.Generator` or a static image
shipped with the app.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from django.templatetags.static import static

from avatarcache.cache.filesystem import get_shard
from avatarcache.conf import get_site_id
from avatarcache.errors import GenerationFailedError
from avatarcache.hashing import Hasher
from avatarcache.icons.generators.base import Generator
from avatarcache.icons.generators.custom import CustomImageGenerator
from avatarcache.images.types import get_extension


logger = logging.getLogger(__name__)


#: A function returning the cache path for an icon, given the identity hash,
#: the size and the file extension.
FilenameFunc = Callable[[str, int, str], str]


class IconProvider:
    """Provides default icons for a set of type names.

    A provider either has a generator, in which case its icons are built
    and stored in the file cache, or only a static image.

    Generating providers may also have a static image, which is used when
    generation fails.
    """

    def __init__(
        self,
        types: Sequence[str],
        name: str = '',
        generator: Optional[Generator] = None,
        static_name: Optional[str] = None,
        namespace: Optional[str] = None,
        filename_func: Optional[FilenameFunc] = None,
    ) -> None:
        """Initialize the provider.

        Args:
            types (list of str):
                The type names handled by the provider. The first one is the
                primary type, stored in settings.

            name (str, optional):
                The name shown to users.

            generator (avatarcache.icons.generators.base.Generator,
                       optional):
                The generator building the icons.

            static_name (str, optional):
                The path of a static image, relative to the static files
                root.

            namespace (str, optional):
                The cache directory for generated icons. Defaults to the
                primary type.

            filename_func (callable, optional):
                A function overriding how cache paths are built.

        Raises:
            ValueError:
                No types were given, or neither a generator nor a static
                image.
        """
        if not types:
            raise ValueError('An icon provider needs at least one type.')

        if generator is None and static_name is None:
            raise ValueError('An icon provider needs a generator or a '
                             'static image.')

        self.types = tuple(types)
        self.name = name
        self.generator = generator
        self.static_name = static_name
        self.namespace = namespace or self.types[0]
        self._filename_func = filename_func

    def __repr__(self) -> str:
        return '<IconProvider %s>' % self.get_option_value()

    def get_provided_types(self) -> Sequence[str]:
        """Return the type names handled by this provider."""
        return self.types

    def get_option_value(self) -> str:
        """Return the primary type name."""
        return self.types[0]

    def get_name(self) -> str:
        """Return the name shown to users."""
        return self.name

    def provides(
        self,
        icon_type: str,
    ) -> bool:
        """Return whether the provider handles a type name.

        Args:
            icon_type (str):
                The type name.

        Returns:
            bool:
            ``True`` if the type is handled.
        """
        return icon_type in self.types

    @property
    def is_static(self) -> bool:
        """Whether the provider only serves a static image."""
        return self.generator is None

    def get_static_url(self) -> Optional[str]:
        """Return the URL of the provider's static image.

        Returns:
            str:
            The URL, or ``None`` if the provider has no static image.
        """
        if self.static_name is None:
            return None

        return static(self.static_name)

    def get_filename(
        self,
        hash_value: str,
        size: int,
    ) -> str:
        """Return the cache path for a generated icon.

        Args:
            hash_value (str):
                The identity hash.

            size (int):
                The width and height of the icon, in pixels.

        Returns:
            str:
            The path relative to the cache root.
        """
        assert self.generator is not None

        extension = get_extension(self.generator.mimetype)

        if self._filename_func is not None:
            return self._filename_func(hash_value, size, extension)

        return '%s/%s/%s-%d.%s' % (self.namespace, get_shard(hash_value),
                                   hash_value, size, extension)

    def build(
        self,
        hash_value: str,
        size: int,
    ) -> bytes:
        """Build an icon.

        Generation errors are logged, not raised.

        Args:
            hash_value (str):
                The identity hash.

            size (int):
                The width and height of the icon, in pixels.

        Returns:
            bytes:
            The image data, or empty data if the icon couldn't be built.
        """
        if self.generator is None:
            return b''

        try:
            return self.generator.build(hash_value, size)
        except GenerationFailedError as e:
            logger.warning('Unable to generate "%s" icon: %s',
                           self.get_option_value(), e)
        except Exception as e:
            logger.exception('Unexpected error generating "%s" icon: %s',
                             self.get_option_value(), e)

        return b''


def get_custom_filename_func(
    hasher: Hasher,
) -> FilenameFunc:
    """Return the cache path builder for custom default icons.

    Custom icons are the same for every identity, so they are stored once
    per site and size as ``custom/{site_id}/{site hash}-{size}.{ext}``.

    Args:
        hasher (avatarcache.hashing.Hasher):
            The hasher used to name the site's icons.

    Returns:
        callable:
        The path builder.
    """
    def _get_filename(
        hash_value: str,
        size: int,
        extension: str,
    ) -> str:
        site_id = get_site_id()

        return 'custom/%s/%s-%d.%s' % (
            site_id,
            hasher.get_hash('custom-default-%s' % site_id),
            size,
            extension)

    return _get_filename


def make_svg_provider(
    types: Sequence[str],
    basename: str,
    name: str = '',
) -> IconProvider:
    """Return a provider for a static SVG icon shipped with the app.

    Args:
        types (list of str):
            The type names handled by the provider.

        basename (str):
            The name of the SVG file, without the extension.

        name (str, optional):
            The name shown to users.

    Returns:
        IconProvider:
        The provider.
    """
    return IconProvider(types=types,
                        name=name,
                        static_name='avatarcache/images/%s.svg' % basename)


def make_generating_provider(
    types: Sequence[str],
    generator: Generator,
    name: str = '',
) -> IconProvider:
    """Return a provider storing generated icons in the file cache.

    Args:
        types (list of str):
            The type names handled by the provider. The primary type is also
            the cache directory.

        generator (avatarcache.icons.generators.base.Generator):
            The generator building the icons.

        name (str, optional):
            The name shown to users.

    Returns:
        IconProvider:
        The provider.
    """
    return IconProvider(types=types,
                        name=name,
                        generator=generator)


def make_custom_provider(
    hasher: Hasher,
    name: str = '',
    generator: Optional[CustomImageGenerator] = None,
) -> IconProvider:
    """Return the provider for the site's custom default icon.

    When no custom icon is configured, or it can't be resized, a blank
    image is used.

    Args:
        hasher (avatarcache.hashing.Hasher):
            The hasher used to name the cached icons.

        name (str, optional):
            The name shown to users.

        generator (avatarcache.icons.generators.custom.CustomImageGenerator,
                   optional):
            The generator to use. Defaults to one reading
            ``AVATAR_CACHE_CUSTOM_DEFAULT``.

    Returns:
        IconProvider:
        The provider.
    """
    return IconProvider(types=['custom'],
                        name=name,
                        generator=generator or CustomImageGenerator(),
                        static_name='avatarcache/images/blank.gif',
                        filename_func=get_custom_filename_func(hasher))
