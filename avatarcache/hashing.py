"""Salted hashing of identities (e-mail addresses and URLs)."""

from __future__ import annotations

import hashlib
from typing import Callable, Optional

from avatarcache.conf import get_salt


class Hasher:
    """Turns identifiers into salted, one-way identity hashes.

    The resulting hex digests are used both as cache keys and as the seed
    for generated icons.

    The salt comes from a provider callable. Generating and persisting the
    salt is up to that provider. By default, :py:func:`avatarcache.conf.get_salt`
    is used.
    """

    #: The name of the :py:mod:`hashlib` algorithm to use.
    algorithm: str = 'sha256'

    def __init__(
        self,
        salt_provider: Optional[Callable[[], str]] = None,
    ) -> None:
        """Initialize the hasher.

        Args:
            salt_provider (callable, optional):
                A function returning the salt.
        """
        self._salt_provider = salt_provider or get_salt
        self._salt: Optional[str] = None

    @property
    def salt(self) -> str:
        """The salt, fetched once from the provider."""
        if self._salt is None:
            self._salt = self._salt_provider()

        return self._salt

    def get_hash(
        self,
        identifier: str,
        case_sensitive: bool = False,
    ) -> str:
        """Return the identity hash for an identifier.

        Whitespace is stripped from the identifier. Unless
        ``case_sensitive`` is set, it's also lower-cased.

        Args:
            identifier (str):
                The e-mail address or URL to hash.

            case_sensitive (bool, optional):
                Whether to keep the case of the identifier (for URLs).

        Returns:
            str:
            The hex digest.
        """
        identifier = identifier.strip()

        if not case_sensitive:
            identifier = identifier.lower()

        return hashlib.new(
            self.algorithm,
            ('%s%s' % (self.salt, identifier)).encode('utf-8')).hexdigest()
