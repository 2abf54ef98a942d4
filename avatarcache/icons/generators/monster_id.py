"""MonsterID icons: little monsters assembled from colorized parts."""

from __future__ import annotations

import json
import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import importlib_resources
from PIL import Image

from avatarcache.icons.generators.base import NumberGenerator
from avatarcache.icons.generators.parts import PartsGenerator
from avatarcache.images.color import MAX_DEGREE, MAX_PERCENT, hsl_to_rgb


logger = logging.getLogger(__name__)


#: A bounding box of the colorizable pixels of a part, as
#: ``((x_min, x_max), (y_min, y_max))``.
PartBounds = Tuple[Tuple[int, int], Tuple[int, int]]


#: Parts colored with the body's hue and saturation.
SAME_COLOR_PARTS = frozenset({
    'arms_6.json',
    'legs_4.json',
    'mouth_5.json',
})

#: Parts colored with a random hue from a fixed range, given as fractions
#: of the full circle.
SPECIFIC_COLOR_PARTS: Mapping[str, Tuple[float, float]] = {
    'hair_4.json': (0.6, 0.75),
    'arms_2.json': (-0.05, 0.05),
    'mouth_3.json': (-0.05, 0.05),
}

#: Parts colored with their own random hue and saturation.
RANDOM_COLOR_PARTS = frozenset({
    'arms_3.json',
    'arms_4.json',
    'hair_2.json',
    'hair_3.json',
    'hair_5.json',
    'legs_1.json',
    'legs_2.json',
    'legs_5.json',
    'mouth_4.json',
})

#: Pixels at or below this alpha are never colorized.
MIN_COLORIZE_ALPHA = 24


def is_colorizable(
    red: int,
    green: int,
    blue: int,
    alpha: int,
) -> bool:
    """Return whether a pixel takes part in colorization.

    Black outlines, white highlights and nearly transparent pixels keep
    their colors.

    Args:
        red (int):
            The red component.

        green (int):
            The green component.

        blue (int):
            The blue component.

        alpha (int):
            The alpha component.

    Returns:
        bool:
        ``True`` if the pixel should be recolored.
    """
    lightness = (red + green + blue) / 3 / 255 * MAX_PERCENT

    return (10 < lightness < 99 and
            alpha > MIN_COLORIZE_ALPHA)


def find_colorizable_bounds(
    image: Image.Image,
) -> Optional[PartBounds]:
    """Return the bounding box of the colorizable pixels of a part.

    Args:
        image (PIL.Image.Image):
            The rendered part.

    Returns:
        tuple:
        The bounds, or ``None`` if no pixel is colorizable.
    """
    image = image.convert('RGBA')
    pixels = image.load()
    width, height = image.size
    xs: List[int] = []
    ys: List[int] = []

    for x in range(width):
        for y in range(height):
            if is_colorizable(*pixels[x, y]):
                xs.append(x)
                ys.append(y)

    if not xs:
        return None

    return (min(xs), max(xs)), (min(ys), max(ys))


class MonsterIDGenerator(PartsGenerator):
    """Generates MonsterID icons.

    A number generator seeded from the hash picks one part for each
    region, then the body color. Parts are colorized in place by keeping
    each pixel's lightness and replacing its hue and saturation.
    """

    parts_dir = 'parts/monster_id'
    regions = ('legs', 'hair', 'arms', 'body', 'eyes', 'mouth')

    #: The native size of the parts.
    SIZE = 120

    #: The file holding the background.
    BACKGROUND_FILE = 'back.json'

    #: The file holding the precomputed colorizable bounds of the parts.
    BOUNDS_FILE = 'bounds.json'

    def __init__(self) -> None:
        """Initialize the generator."""
        super().__init__()

        self._bounds: Optional[Dict[str, PartBounds]] = None

    def select_parts(
        self,
        hash_value: str,
        parts: Mapping[str, Sequence[str]],
        rng: NumberGenerator,
    ) -> Dict[str, str]:
        """Choose one part per region.

        Args:
            hash_value (str):
                The identity hash.

            parts (dict):
                The available part files, by region.

            rng (avatarcache.icons.generators.base.NumberGenerator):
                The number generator for this build.

        Returns:
            dict:
            A mapping of region names to part file names.
        """
        return {
            region: rng.choice(parts[region])
            for region in self.regions
        }

    def render(
        self,
        hash_value: str,
        parts: Mapping[str, str],
        rng: NumberGenerator,
    ) -> Image.Image:
        """Compose a monster.

        Args:
            hash_value (str):
                The identity hash.

            parts (dict):
                The selected part file names, by region.

            rng (avatarcache.icons.generators.base.NumberGenerator):
                The number generator used to select the parts.

        Returns:
            PIL.Image.Image:
            The composed image.
        """
        monster = self.get_part_image(self.BACKGROUND_FILE).copy()
        hue = rng.get_real() * MAX_DEGREE
        saturation = self._random_saturation(rng)

        for region in self.regions:
            filename = parts[region]
            part = self.get_part_image(filename)
            color = None

            if region == 'body' or filename in SAME_COLOR_PARTS:
                color = (hue, saturation)
            elif filename in RANDOM_COLOR_PARTS:
                color = (rng.get_real() * MAX_DEGREE,
                         self._random_saturation(rng))
            elif filename in SPECIFIC_COLOR_PARTS:
                low, high = SPECIFIC_COLOR_PARTS[filename]
                part_hue = (rng.get(int(low * 10000), int(high * 10000)) /
                            10000 * MAX_DEGREE)
                color = (part_hue, self._random_saturation(rng))

            if color is not None:
                part = self.colorize(part, color[0], color[1], filename)

            monster.alpha_composite(part)

        return monster

    def colorize(
        self,
        image: Image.Image,
        hue: float,
        saturation: float,
        filename: str = '',
    ) -> Image.Image:
        """Return a recolored copy of a part.

        Args:
            image (PIL.Image.Image):
                The rendered part.

            hue (float):
                The new hue, in degrees. Negative values wrap around.

            saturation (float):
                The new saturation, in percent.

            filename (str, optional):
                The part's file name, used to look up precomputed bounds.

        Returns:
            PIL.Image.Image:
            The recolored part.
        """
        image = image.copy()
        pixels = image.load()
        width, height = image.size

        if hue < 0:
            hue += MAX_DEGREE

        bounds = self.get_bounds().get(filename)

        if bounds is None:
            (x_min, x_max), (y_min, y_max) = (0, width - 1), (0, height - 1)
        else:
            (x_min, x_max), (y_min, y_max) = bounds

        for x in range(x_min, min(x_max, width - 1) + 1):
            for y in range(y_min, min(y_max, height - 1) + 1):
                red, green, blue, alpha = pixels[x, y]

                if is_colorizable(red, green, blue, alpha):
                    lightness = (red + green + blue) / 3 / 255 * MAX_PERCENT
                    pixels[x, y] = hsl_to_rgb(hue, saturation,
                                              lightness) + (alpha,)

        return image

    def get_bounds(self) -> Dict[str, PartBounds]:
        """Return the precomputed colorizable bounds of the parts.

        Parts without an entry are scanned in full.

        Returns:
            dict:
            A mapping of part file names to bounds.
        """
        if self._bounds is None:
            resource = (importlib_resources.files(self.parts_package)
                        .joinpath(self.parts_dir, self.BOUNDS_FILE))

            try:
                data = json.loads(resource.read_text(encoding='utf-8'))
            except (OSError, ValueError) as e:
                logger.warning('Unable to load icon part bounds from '
                               '"%s": %s',
                               self.parts_dir, e)
                data = {}

            self._bounds = {
                filename: ((x[0], x[1]), (y[0], y[1]))
                for filename, (x, y) in data.items()
            }

        return self._bounds

    def compute_bounds(self) -> Dict[str, PartBounds]:
        """Scan every part for the bounds of its colorizable pixels.

        Parts with no colorizable pixels are left out.

        Returns:
            dict:
            A mapping of part file names to bounds.
        """
        result: Dict[str, PartBounds] = {}

        for filenames in self.get_parts().values():
            for filename in filenames:
                bounds = find_colorizable_bounds(
                    self.get_part_image(filename))

                if bounds is not None:
                    result[filename] = bounds

        return result

    def _random_saturation(
        self,
        rng: NumberGenerator,
    ) -> float:
        return rng.get(25000, 100000) / 100000 * MAX_PERCENT
