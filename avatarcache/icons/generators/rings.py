"""Concentric ring icons."""

from __future__ import annotations

import math
from typing import List, Tuple

from avatarcache.errors import GenerationFailedError
from avatarcache.icons.generators.base import (Generator,
                                               NumberGenerator,
                                               parse_hash)
from avatarcache.images.color import hsl_to_rgb, rgb_to_hex
from avatarcache.images.types import SVG_IMAGE


class RingsGenerator(Generator):
    """Generates SVG icons made of concentric, segmented rings.

    The background and foreground colors come from a number generator
    seeded with the hash. Which ring segments are drawn is read directly
    from the hash bits.
    """

    mimetype = SVG_IMAGE

    #: The size of the SVG coordinate system.
    VIEWBOX = 100

    #: The number of rings.
    RING_COUNT = 3

    #: The number of segments per ring.
    SEGMENTS = 8

    #: The stroke width of each ring.
    RING_WIDTH = 8

    def build(
        self,
        hash_value: str,
        size: int,
    ) -> bytes:
        """Build a ring icon.

        Args:
            hash_value (str):
                The identity hash. At least 14 hex digits are needed.

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
            rng = NumberGenerator(hash_value)
            background, foreground = self.get_colors(rng)
            rotation = rng.get(0, 359)
            segments = self.get_segments(hash_value)
        except ValueError as e:
            raise GenerationFailedError(
                'Unable to build ring icon for "%s": %s' % (hash_value, e))

        center = self.VIEWBOX / 2
        parts = [
            '<svg xmlns="http://www.w3.org/2000/svg" width="%d" height="%d" '
            'viewBox="0 0 %d %d">'
            % (size, size, self.VIEWBOX, self.VIEWBOX),
            '<circle cx="%g" cy="%g" r="%g" fill="%s"/>'
            % (center, center, center, background),
            '<g fill="none" stroke="%s" stroke-width="%d" '
            'transform="rotate(%d %g %g)">'
            % (foreground, self.RING_WIDTH, rotation, center, center),
        ]

        for ring, ring_segments in enumerate(segments):
            radius = center - self.RING_WIDTH * (1.5 * ring + 1)

            for segment, enabled in enumerate(ring_segments):
                if enabled:
                    parts.append('<path d="%s"/>'
                                 % self._arc(center, radius, segment))

        parts.append('</g>')

        if parse_hash(hash_value, 0) % 2:
            parts.append('<circle cx="%g" cy="%g" r="%g" fill="%s"/>'
                         % (center, center, self.RING_WIDTH * 0.75,
                            foreground))

        parts.append('</svg>')

        return ''.join(parts).encode('utf-8')

    def get_colors(
        self,
        rng: NumberGenerator,
    ) -> Tuple[str, str]:
        """Return a light background and a bright foreground color.

        Args:
            rng (avatarcache.icons.generators.base.NumberGenerator):
                The seeded number generator.

        Returns:
            tuple:
            The background and foreground colors, as ``#rrggbb`` strings.
        """
        background = hsl_to_rgb(rng.get(0, 359), rng.get(20, 50),
                                rng.get(82, 92))
        foreground = hsl_to_rgb(rng.get(0, 359), rng.get(65, 100),
                                rng.get(38, 52))

        return rgb_to_hex(background), rgb_to_hex(foreground)

    def get_segments(
        self,
        hash_value: str,
    ) -> List[List[bool]]:
        """Return which segments of each ring are drawn.

        Ring ``n`` reads its bits from hash digits ``2 + 4n`` and
        ``3 + 4n``.

        Args:
            hash_value (str):
                The identity hash.

        Returns:
            list of list of bool:
            The segment flags, outermost ring first.
        """
        segments = []

        for ring in range(self.RING_COUNT):
            bits = parse_hash(hash_value, 2 + ring * 4, 2)

            if bits == 0:
                # An empty ring would look like a missing ring.
                bits = 1 << ring

            segments.append([
                bool(bits & (1 << segment))
                for segment in range(self.SEGMENTS)
            ])

        return segments

    def _arc(
        self,
        center: float,
        radius: float,
        segment: int,
    ) -> str:
        """Return the path data for one ring segment."""
        step = 2 * math.pi / self.SEGMENTS
        start = segment * step
        end = start + step

        return 'M%.2f %.2fA%g %g 0 0 1 %.2f %.2f' % (
            center + radius * math.cos(start),
            center + radius * math.sin(start),
            radius, radius,
            center + radius * math.cos(end),
            center + radius * math.sin(end))
