"""Wavatar icons: cartoon faces built from layered parts."""

from __future__ import annotations

from typing import Dict, Mapping, Sequence

from PIL import Image, ImageChops

from avatarcache.icons.generators.base import NumberGenerator, parse_hash
from avatarcache.icons.generators.parts import PartsGenerator
from avatarcache.images.color import RGBColor, hsl_to_rgb


class WavatarGenerator(PartsGenerator):
    """Generates wavatar icons.

    Pairs of hash digits starting at offset 1 select the face, the colors
    and the facial features. The face mask shares its index with the face
    shine.
    """

    parts_dir = 'parts/wavatar'
    regions = ('fade', 'mask', 'shine', 'brow', 'eyes', 'pupils', 'mouth')

    #: The native size of the parts.
    SIZE = 80

    #: The saturation of both colors.
    SATURATION = 94

    #: The lightness of the background.
    BACKGROUND_LIGHTNESS = 20

    #: The lightness of the face.
    FACE_LIGHTNESS = 66

    #: The hash offsets of each 2-digit parameter.
    OFFSETS = {
        'face': 1,
        'background': 3,
        'fade': 5,
        'face_color': 7,
        'brow': 9,
        'eyes': 11,
        'pupils': 13,
        'mouth': 15,
    }

    def select_parts(
        self,
        hash_value: str,
        parts: Mapping[str, Sequence[str]],
        rng: NumberGenerator,
    ) -> Dict[str, str]:
        """Choose the parts for a hash.

        Args:
            hash_value (str):
                The identity hash.

            parts (dict):
                The available part files, by region.

            rng (avatarcache.icons.generators.base.NumberGenerator):
                Unused. Wavatars read their parameters from the hash.

        Returns:
            dict:
            A mapping of region names to part file names.
        """
        face = self._seed(hash_value, 'face')
        faces = min(len(parts['mask']), len(parts['shine']))

        return {
            'fade': self._pick(hash_value, 'fade', parts['fade']),
            'mask': parts['mask'][face % faces],
            'shine': parts['shine'][face % faces],
            'brow': self._pick(hash_value, 'brow', parts['brow']),
            'eyes': self._pick(hash_value, 'eyes', parts['eyes']),
            'pupils': self._pick(hash_value, 'pupils', parts['pupils']),
            'mouth': self._pick(hash_value, 'mouth', parts['mouth']),
        }

    def get_colors(
        self,
        hash_value: str,
    ) -> Dict[str, RGBColor]:
        """Return the background and face colors for a hash.

        Args:
            hash_value (str):
                The identity hash.

        Returns:
            dict:
            The ``background`` and ``face`` colors.
        """
        return {
            'background': hsl_to_rgb(self._hue(hash_value, 'background'),
                                     self.SATURATION,
                                     self.BACKGROUND_LIGHTNESS),
            'face': hsl_to_rgb(self._hue(hash_value, 'face_color'),
                               self.SATURATION,
                               self.FACE_LIGHTNESS),
        }

    def render(
        self,
        hash_value: str,
        parts: Mapping[str, str],
        rng: NumberGenerator,
    ) -> Image.Image:
        """Compose a wavatar.

        Args:
            hash_value (str):
                The identity hash.

            parts (dict):
                The selected part file names, by region.

            rng (avatarcache.icons.generators.base.NumberGenerator):
                Unused.

        Returns:
            PIL.Image.Image:
            The composed image.
        """
        colors = self.get_colors(hash_value)
        size = (self.SIZE, self.SIZE)
        avatar = Image.new('RGBA', size, colors['background'] + (255,))

        avatar.alpha_composite(self.get_part_image(parts['fade']))

        # The mask is drawn white and tinted with the face color. Its
        # black outline is unaffected.
        mask = self.get_part_image(parts['mask'])
        tinted = ImageChops.multiply(
            mask.convert('RGB'),
            Image.new('RGB', size, colors['face']))
        tinted.putalpha(mask.getchannel('A'))
        avatar.alpha_composite(tinted)

        for region in ('shine', 'brow', 'eyes', 'pupils', 'mouth'):
            avatar.alpha_composite(self.get_part_image(parts[region]))

        return avatar

    def _seed(
        self,
        hash_value: str,
        name: str,
    ) -> int:
        return parse_hash(hash_value, self.OFFSETS[name], 2)

    def _hue(
        self,
        hash_value: str,
        name: str,
    ) -> float:
        return self._seed(hash_value, name) % 240 / 255 * 360

    def _pick(
        self,
        hash_value: str,
        name: str,
        filenames: Sequence[str],
    ) -> str:
        return filenames[self._seed(hash_value, name) % len(filenames)]
