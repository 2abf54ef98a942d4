"""The registry of icon providers."""

from __future__ import annotations

import logging
from collections import OrderedDict
from enum import Enum
from threading import RLock
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from django.utils.translation import gettext_lazy as _
from importlib_metadata import EntryPoint, entry_points
from typing_extensions import Final

from avatarcache.errors import (AlreadyRegisteredError,
                                IconProviderNotFoundError)
from avatarcache.hashing import Hasher
from avatarcache.icons.generators.jdenticon import JdenticonGenerator
from avatarcache.icons.generators.monster_id import MonsterIDGenerator
from avatarcache.icons.generators.retro import RetroGenerator
from avatarcache.icons.generators.rings import RingsGenerator
from avatarcache.icons.generators.wavatar import WavatarGenerator
from avatarcache.icons.providers import (IconProvider,
                                         make_custom_provider,
                                         make_generating_provider,
                                         make_svg_provider)


logger = logging.getLogger(__name__)


#: Error code indicating a type name is already registered.
ALREADY_REGISTERED: Final[str] = 'already_registered'

#: Error code indicating no provider handles a type name.
NOT_REGISTERED: Final[str] = 'not_registered'

#: Error code indicating an entry point could not be loaded.
LOAD_ENTRY_POINT: Final[str] = 'load_entry_point'


class RegistryState(Enum):
    """The population state of a registry."""

    #: The registry is pending setup.
    PENDING = 0

    #: The registry is in the process of populating providers.
    POPULATING = 1

    #: The registry is populated and ready to be used.
    READY = 2


def get_default_icon_providers(
    hasher: Hasher,
) -> List[IconProvider]:
    """Return the built-in icon providers.

    These are in the order they should appear in settings forms.

    Args:
        hasher (avatarcache.hashing.Hasher):
            The hasher used for the custom icon's cache paths.

    Returns:
        list of avatarcache.icons.providers.IconProvider:
        The providers.
    """
    return [
        make_svg_provider(['mystery', 'mystery-man', 'mm'], 'mystery',
                          name=_('Mystery Person')),
        make_generating_provider(['identicon'], JdenticonGenerator(),
                                 name=_('Identicon')),
        make_generating_provider(['wavatar'], WavatarGenerator(),
                                 name=_('Wavatar')),
        make_generating_provider(['monsterid'], MonsterIDGenerator(),
                                 name=_('MonsterID')),
        make_generating_provider(['retro'], RetroGenerator(),
                                 name=_('Retro')),
        make_generating_provider(['rings'], RingsGenerator(),
                                 name=_('Rings')),
        make_svg_provider(['bubble', 'comment'], 'comment-bubble',
                          name=_('Speech Bubble')),
        make_svg_provider(['bowling-pin', 'im-user-offline'], 'shaded-cone',
                          name=_('Bowling Pin')),
        make_svg_provider(['silhouette', 'view-media-artist'], 'silhouette',
                          name=_('Silhouette')),
        make_custom_provider(hasher, name=_('Custom')),
    ]


class IconProviderRegistry:
    """An ordered, read-only collection of icon providers.

    The registry is populated once, on first use, from an explicit list of
    providers (the built-in ones by default) followed by any providers
    exposed through the :py:attr:`entry_point` group. Every type name maps
    to exactly one provider.

    Entry points may refer to an
    :py:class:`~avatarcache.icons.providers.IconProvider` or to a callable
    returning one.
    """

    #: The entry point group for third-party providers.
    entry_point: Optional[str] = 'avatarcache.icon_providers'

    #: Error formatting strings for exceptions.
    errors: Dict[str, str] = {
        ALREADY_REGISTERED: _(
            'Could not register icon provider %(item)r: type "%(type)s" is '
            'already provided by %(duplicate)r.'
        ),
        NOT_REGISTERED: _(
            'No icon provider is registered for type "%(type)s".'
        ),
        LOAD_ENTRY_POINT: _(
            'Could not load icon provider entry point %(entry_point)s: '
            '%(error)s.'
        ),
    }

    def __init__(
        self,
        providers: Optional[Sequence[IconProvider]] = None,
        hasher: Optional[Hasher] = None,
    ) -> None:
        """Initialize the registry.

        Args:
            providers (list of avatarcache.icons.providers.IconProvider,
                       optional):
                The providers to register, in order. Defaults to the
                built-in providers.

            hasher (avatarcache.hashing.Hasher, optional):
                The hasher passed to the built-in providers.
        """
        self.state = RegistryState.PENDING
        self._initial_providers = providers
        self._hasher = hasher or Hasher()
        self._lock = RLock()
        self._providers: List[IconProvider] = []
        self._mapping: Dict[str, IconProvider] = {}

    def format_error(
        self,
        error_name: str,
        **error_kwargs,
    ) -> str:
        """Format an error message.

        Args:
            error_name (str):
                A symbolic name for the error, such as
                :py:data:`NOT_REGISTERED`.

            **error_kwargs (dict):
                The keyword arguments for the error's formatting string.

        Returns:
            str:
            The formatted error message.

        Raises:
            ValueError:
                ``error_name`` is not a known error.
        """
        fmt = self.errors.get(error_name)

        if fmt is None:
            raise ValueError('%s.format_error: Unknown error: "%s".'
                             % (type(self).__name__, error_name))

        return fmt % error_kwargs

    def populate(self) -> None:
        """Populate the registry.

        This only does work the first time it's called. The providers from
        :py:meth:`get_defaults` are registered first. A provider loaded from
        an entry point that claims an already registered type name is
        logged and skipped.

        Raises:
            avatarcache.errors.AlreadyRegisteredError:
                Two of the default providers claim the same type name.
        """
        if self.state == RegistryState.READY:
            return

        with self._lock:
            if self.state != RegistryState.PENDING:
                # Either another thread populated the registry while we were
                # waiting, or this is a reentrant call.
                return

            self.state = RegistryState.POPULATING

            try:
                for provider in self.get_defaults():
                    self._register(provider)

                for provider in self.get_entry_point_providers():
                    try:
                        self._register(provider)
                    except AlreadyRegisteredError as e:
                        logger.error('Skipping icon provider: %s', e)
            except Exception:
                self._providers = []
                self._mapping = {}
                self.state = RegistryState.PENDING
                raise

            self.state = RegistryState.READY

    def get_defaults(self) -> Iterable[IconProvider]:
        """Yield the providers registered before any entry points.

        Yields:
            avatarcache.icons.providers.IconProvider:
            Each provider, in order.
        """
        if self._initial_providers is None:
            yield from get_default_icon_providers(self._hasher)
        else:
            yield from self._initial_providers

    def get_entry_point_providers(self) -> Iterable[IconProvider]:
        """Yield the providers exposed through :py:attr:`entry_point`.

        Entry points that can't be loaded are logged and skipped.

        Yields:
            avatarcache.icons.providers.IconProvider:
            Each provider, in order.
        """
        if self.entry_point is None:
            return

        for ep in entry_points(group=self.entry_point):
            try:
                yield self.process_value_from_entry_point(ep)
            except Exception as e:
                logger.exception(self.format_error(LOAD_ENTRY_POINT,
                                                   entry_point=ep.name,
                                                   error=e))

    def process_value_from_entry_point(
        self,
        entry_point: EntryPoint,
    ) -> IconProvider:
        """Return the provider to register from an entry point.

        Args:
            entry_point (importlib.metadata.EntryPoint):
                The entry point.

        Returns:
            avatarcache.icons.providers.IconProvider:
            The provider.

        Raises:
            TypeError:
                The entry point doesn't refer to a provider.
        """
        value = entry_point.load()

        if not isinstance(value, IconProvider) and callable(value):
            value = value()

        if not isinstance(value, IconProvider):
            raise TypeError('%r is not an IconProvider' % (value,))

        return value

    def get_provider_mapping(self) -> Dict[str, IconProvider]:
        """Return the providers, indexed by every type name they handle.

        Returns:
            dict:
            A mapping of type names to providers. This is a copy.
        """
        self.populate()

        return dict(self._mapping)

    def resolve(
        self,
        icon_type: str,
    ) -> Optional[IconProvider]:
        """Return the provider for a type name.

        Args:
            icon_type (str):
                The type name, or one of its aliases.

        Returns:
            avatarcache.icons.providers.IconProvider:
            The provider, or ``None`` if no provider handles the type.
        """
        self.populate()

        return self._mapping.get(icon_type)

    def get(
        self,
        icon_type: str,
    ) -> IconProvider:
        """Return the provider for a type name.

        Args:
            icon_type (str):
                The type name, or one of its aliases.

        Returns:
            avatarcache.icons.providers.IconProvider:
            The provider.

        Raises:
            avatarcache.errors.IconProviderNotFoundError:
                No provider handles the type.
        """
        provider = self.resolve(icon_type)

        if provider is None:
            raise IconProviderNotFoundError(
                self.format_error(NOT_REGISTERED, type=icon_type))

        return provider

    def get_avatar_defaults(self) -> Dict[str, str]:
        """Return the choices for a default icon setting.

        Returns:
            collections.OrderedDict:
            A mapping of primary type names to user-visible names, in
            registration order.
        """
        self.populate()

        return OrderedDict(
            (provider.get_option_value(), str(provider.get_name()))
            for provider in self._providers
        )

    def __iter__(self) -> Iterator[IconProvider]:
        """Iterate through the providers in registration order.

        Yields:
            avatarcache.icons.providers.IconProvider:
            Each provider.
        """
        self.populate()

        yield from list(self._providers)

    def __len__(self) -> int:
        """Return the number of providers."""
        self.populate()

        return len(self._providers)

    def __contains__(
        self,
        icon_type: object,
    ) -> bool:
        """Return whether a type name is handled by any provider.

        Args:
            icon_type (str):
                The type name.

        Returns:
            bool:
            ``True`` if a provider handles the type.
        """
        self.populate()

        return icon_type in self._mapping

    def _register(
        self,
        provider: IconProvider,
    ) -> None:
        """Register a provider during population.

        Args:
            provider (avatarcache.icons.providers.IconProvider):
                The provider to register.

        Raises:
            avatarcache.errors.AlreadyRegisteredError:
                One of the provider's types is already registered.
        """
        for icon_type in provider.get_provided_types():
            duplicate = self._mapping.get(icon_type)

            if duplicate is not None:
                raise AlreadyRegisteredError(self.format_error(
                    ALREADY_REGISTERED,
                    item=provider,
                    type=icon_type,
                    duplicate=duplicate))

        for icon_type in provider.get_provided_types():
            self._mapping[icon_type] = provider

        self._providers.append(provider)
