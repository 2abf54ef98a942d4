"""Base classes for icon generators."""

from __future__ import annotations

import random
from typing import Sequence, TypeVar

from avatarcache.images.types import PNG_IMAGE


_T = TypeVar('_T')


class Generator:
    """Builds icon image data from an identity hash.

    Generators are pure: the same hash and size always produce the same
    bytes.

    Subclasses must set :py:attr:`mimetype` and override :py:meth:`build`.
    """

    #: The MIME type of the generated image data.
    mimetype: str = PNG_IMAGE

    def build(
        self,
        hash_value: str,
        size: int,
    ) -> bytes:
        """Build an icon.

        Args:
            hash_value (str):
                The identity hash, as a string of hex digits.

            size (int):
                The width and height of the icon, in pixels.

        Returns:
            bytes:
            The encoded image.

        Raises:
            avatarcache.errors.GenerationFailedError:
                The icon could not be built.
        """
        raise NotImplementedError('%r must implement build()'
                                  % type(self).__name__)


class NumberGenerator:
    """A deterministic source of "random" numbers for one icon.

    The sequence is seeded from the first 8 hex digits of the identity
    hash. Each icon build owns its own instance, so no global random state
    is touched.
    """

    def __init__(
        self,
        hash_value: str,
    ) -> None:
        """Initialize the generator.

        Args:
            hash_value (str):
                The identity hash.
        """
        self._random = random.Random(int(hash_value[:8], 16))

    def get(
        self,
        minimum: int,
        maximum: int,
    ) -> int:
        """Return an integer between two bounds (inclusive).

        Args:
            minimum (int):
                The lower bound.

            maximum (int):
                The upper bound.

        Returns:
            int:
            The next number.
        """
        return self._random.randint(minimum, maximum)

    def get_real(self) -> float:
        """Return a float in the half-open interval [0, 1)."""
        return self._random.random()

    def choice(
        self,
        values: Sequence[_T],
    ) -> _T:
        """Return one of the given values.

        Args:
            values (list):
                The values to choose from. This must not be empty.

        Returns:
            object:
            The chosen value.
        """
        return values[self.get(0, len(values) - 1)]


def parse_hash(
    hash_value: str,
    offset: int,
    length: int = 1,
) -> int:
    """Return the integer value of a group of hex digits in a hash.

    Args:
        hash_value (str):
            The identity hash.

        offset (int):
            The position of the first digit. Negative offsets count from
            the end.

        length (int, optional):
            The number of digits to read.

    Returns:
        int:
        The parsed value.
    """
    if offset < 0:
        digits = hash_value[offset:offset + length or None]
    else:
        digits = hash_value[offset:offset + length]

    return int(digits, 16)
