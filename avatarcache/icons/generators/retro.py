"""Retro "8-bit" identicons.

Each hash digit pair yields one pixel of a 5x5 grid. The grid is
horizontally symmetric by construction: three pairs fill a row, the first
setting columns 0 and 4, the second columns 1 and 3, the third column 2.
"""

from __future__ import annotations

from typing import List

from avatarcache.errors import GenerationFailedError
from avatarcache.icons.generators.base import Generator, parse_hash
from avatarcache.images.color import hex_to_rgb, rgb_to_hex
from avatarcache.images.types import SVG_IMAGE


class RetroGenerator(Generator):
    """Generates pixel-art SVG identicons."""

    mimetype = SVG_IMAGE

    #: The number of pixels per row and column.
    GRID_SIZE = 5

    #: The columns set by each digit pair of a row.
    COLUMNS = ((0, 4), (1, 3), (2,))

    #: Pair values at or above this become set pixels, i.e.
    #: ``round(value / 10 / 15)`` rounding half up.
    PIXEL_THRESHOLD = 75

    def build(
        self,
        hash_value: str,
        size: int,
    ) -> bytes:
        """Build a retro identicon.

        Args:
            hash_value (str):
                The identity hash. At least 30 hex digits are needed.

            size (int):
                The width and height of the icon, in pixels.

        Returns:
            bytes:
            The SVG document.

        Raises:
            avatarcache.errors.GenerationFailedError:
                The hash is too short or not hexadecimal.
        """
        try:
            grid = self.get_pixels(hash_value)
            color = rgb_to_hex(hex_to_rgb(hash_value[0:6]))
            background = self.get_background_color(hash_value)
        except ValueError as e:
            raise GenerationFailedError(
                'Unable to build retro icon for "%s": %s' % (hash_value, e))

        path = ''.join(
            'M%d,%dh1v1h-1v-1' % (x, y)
            for y, row in enumerate(grid)
            for x, pixel in enumerate(row)
            if pixel
        )

        return (
            '<svg xmlns="http://www.w3.org/2000/svg" width="%(size)d" '
            'height="%(size)d" viewBox="0 0 %(grid)d %(grid)d">'
            '<rect width="%(grid)d" height="%(grid)d" fill="%(bg)s" '
            'stroke-width="0"/>'
            '<path fill="%(fg)s" stroke-width="0" d="%(path)s"/>'
            '</svg>'
            % {
                'size': size,
                'grid': self.GRID_SIZE,
                'bg': background,
                'fg': color,
                'path': path,
            }
        ).encode('utf-8')

    def get_pixels(
        self,
        hash_value: str,
    ) -> List[List[bool]]:
        """Return the pixel grid for a hash.

        Args:
            hash_value (str):
                The identity hash.

        Returns:
            list of list of bool:
            The rows of the grid.

        Raises:
            ValueError:
                The hash is too short or not hexadecimal.
        """
        grid_size = self.GRID_SIZE
        columns = self.COLUMNS
        pairs_per_row = len(columns)

        if len(hash_value) < grid_size * pairs_per_row * 2:
            raise ValueError('hash is too short')

        grid = [[False] * grid_size for i in range(grid_size)]

        for i in range(grid_size * pairs_per_row):
            value = parse_hash(hash_value, i * 2, 2)
            row = grid[i // pairs_per_row]

            for column in columns[i % pairs_per_row]:
                row[column] = value >= self.PIXEL_THRESHOLD

        return grid

    def get_background_color(
        self,
        hash_value: str,
    ) -> str:
        """Return the background color for a hash.

        This is the hash's second RGB triple, blended 3:1 with white so the
        foreground stays readable.

        Args:
            hash_value (str):
                The identity hash.

        Returns:
            str:
            The ``#rrggbb`` color.
        """
        return rgb_to_hex(tuple(
            (channel + 255 * 3) // 4
            for channel in hex_to_rgb(hash_value[6:12])
        ))
