"""Generators that compose icons from drawn parts.

Parts are stored as JSON vector definitions in ``avatarcache/icons/parts/``.
Each part directory holds files named ``<region>_<n>.json`` (or
``<region><n>.json``). A part file has the form::

    {
        "size": [80, 80],
        "shapes": [
            {"type": "ellipse", "box": [10, 10, 70, 70],
             "fill": [255, 255, 255, 255], "outline": [0, 0, 0, 255],
             "width": 2},
            ...
        ]
    }

Supported shape types are ``ellipse``, ``rectangle``, ``polygon``,
``line``, ``arc``, ``chord`` and ``pieslice``, matching the methods of
:py:class:`PIL.ImageDraw.ImageDraw`.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from typing import Any, Dict, List, Mapping, Sequence

import importlib_resources
from PIL import Image, ImageDraw

from avatarcache.errors import GenerationFailedError, PartFilesNotFoundError
from avatarcache.icons.generators.base import Generator, NumberGenerator
from avatarcache.images.editor import get_resized_image_data
from avatarcache.images.types import PNG_IMAGE


logger = logging.getLogger(__name__)


_PART_NAME_RE = re.compile(r'^(?P<region>[a-z]+?)_?(?P<index>\d+)\.json$')
_DIGITS_RE = re.compile(r'(\d+)')


def natural_sort_key(
    name: str,
) -> List[Any]:
    """Return a key that sorts embedded numbers by value.

    ``mouth2.json`` sorts before ``mouth10.json``.

    Args:
        name (str):
            The name to build a key for.

    Returns:
        list:
        The sort key.
    """
    return [
        int(piece) if piece.isdigit() else piece.lower()
        for piece in _DIGITS_RE.split(name)
    ]


def load_part_definition(
    package: str,
    parts_dir: str,
    filename: str,
) -> Dict[str, Any]:
    """Load a part definition from the package data.

    Args:
        package (str):
            The package containing the parts directory.

        parts_dir (str):
            The path of the parts directory, relative to the package.

        filename (str):
            The name of the part file.

    Returns:
        dict:
        The parsed definition.

    Raises:
        avatarcache.errors.PartFilesNotFoundError:
            The file could not be read or parsed.
    """
    resource = importlib_resources.files(package).joinpath(parts_dir,
                                                            filename)

    try:
        return json.loads(resource.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        raise PartFilesNotFoundError(
            'Unable to load icon part "%s/%s": %s' % (parts_dir, filename, e))


def render_part(
    definition: Mapping[str, Any],
) -> Image.Image:
    """Draw a part definition onto a transparent canvas.

    Args:
        definition (dict):
            The part definition.

    Returns:
        PIL.Image.Image:
        The rendered RGBA image.

    Raises:
        ValueError:
            The definition is malformed.
    """
    width, height = definition['size']
    image = Image.new('RGBA', (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)

    for shape in definition.get('shapes', []):
        draw_shape(draw, shape)

    return image


def draw_shape(
    draw: ImageDraw.ImageDraw,
    shape: Mapping[str, Any],
) -> None:
    """Draw a single shape.

    Args:
        draw (PIL.ImageDraw.ImageDraw):
            The drawing context.

        shape (dict):
            The shape definition.

    Raises:
        ValueError:
            The shape type is unknown or its geometry is missing.
    """
    shape_type = shape.get('type')
    fill = _color(shape.get('fill'))
    outline = _color(shape.get('outline'))
    width = shape.get('width', 1)

    if shape_type in ('ellipse', 'rectangle'):
        getattr(draw, shape_type)(_coords(shape, 'box'),
                                  fill=fill,
                                  outline=outline,
                                  width=width)
    elif shape_type == 'polygon':
        draw.polygon(_coords(shape, 'points'),
                     fill=fill,
                     outline=outline,
                     width=width)
    elif shape_type == 'line':
        draw.line(_coords(shape, 'points'),
                  fill=fill or outline,
                  width=width,
                  joint='curve')
    elif shape_type == 'arc':
        draw.arc(_coords(shape, 'box'),
                 start=shape['start'],
                 end=shape['end'],
                 fill=outline or fill,
                 width=width)
    elif shape_type in ('chord', 'pieslice'):
        getattr(draw, shape_type)(_coords(shape, 'box'),
                                  start=shape['start'],
                                  end=shape['end'],
                                  fill=fill,
                                  outline=outline,
                                  width=width)
    else:
        raise ValueError('Unknown shape type "%s"' % shape_type)


def _coords(
    shape: Mapping[str, Any],
    key: str,
) -> List[Any]:
    """Return the coordinates of a shape as a flat list."""
    try:
        values = shape[key]
    except KeyError:
        raise ValueError('Shape "%s" is missing "%s"'
                         % (shape.get('type'), key))

    return [
        value
        for item in values
        for value in (item if isinstance(item, (list, tuple)) else [item])
    ]


def _color(
    value: Any,
) -> Any:
    if value is None:
        return None

    return tuple(value)


class PartsGenerator(Generator):
    """Base class for generators that stack image parts.

    Subclasses set :py:attr:`parts_dir` and :py:attr:`regions`, and
    implement :py:meth:`select_parts` and :py:meth:`render`.

    Parts are rendered once and kept in memory for the lifetime of the
    generator.
    """

    mimetype = PNG_IMAGE

    #: The package containing the parts directory.
    parts_package: str = 'avatarcache.icons'

    #: The path of the parts directory, relative to the package.
    parts_dir: str = ''

    #: The ordered list of part regions, bottom layer first.
    regions: Sequence[str] = ()

    def __init__(self) -> None:
        """Initialize the generator."""
        self._parts: Dict[str, List[str]] = {}
        self._images: Dict[str, Image.Image] = {}
        self._lock = threading.RLock()

    def build(
        self,
        hash_value: str,
        size: int,
    ) -> bytes:
        """Build an icon from parts.

        Args:
            hash_value (str):
                The identity hash.

            size (int):
                The width and height of the icon, in pixels.

        Returns:
            bytes:
            The PNG image data.

        Raises:
            avatarcache.errors.GenerationFailedError:
                The icon could not be built.
        """
        try:
            rng = NumberGenerator(hash_value)
            parts = self.select_parts(hash_value, self.get_parts(), rng)
            image = self.render(hash_value, parts, rng)
        except GenerationFailedError:
            raise
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GenerationFailedError(
                'Unable to build %s icon for "%s": %s'
                % (self.parts_dir, hash_value, e))

        data = get_resized_image_data(image, size, size, self.mimetype)

        if not data:
            raise GenerationFailedError(
                'Unable to encode %s icon for "%s"'
                % (self.parts_dir, hash_value))

        return data

    def get_parts(self) -> Dict[str, List[str]]:
        """Return the available part files, by region.

        Returns:
            dict:
            A mapping of region names to naturally sorted file names.

        Raises:
            avatarcache.errors.PartFilesNotFoundError:
                A region has no part files.
        """
        with self._lock:
            if not self._parts:
                self._parts = self._find_parts()

            return self._parts

    def get_part_image(
        self,
        filename: str,
    ) -> Image.Image:
        """Return a rendered part.

        The returned image is shared and must not be modified.

        Args:
            filename (str):
                The name of the part file.

        Returns:
            PIL.Image.Image:
            The rendered part.

        Raises:
            avatarcache.errors.PartFilesNotFoundError:
                The file could not be loaded.
        """
        with self._lock:
            try:
                return self._images[filename]
            except KeyError:
                definition = load_part_definition(self.parts_package,
                                                  self.parts_dir,
                                                  filename)
                image = render_part(definition)
                self._images[filename] = image

                return image

    def select_parts(
        self,
        hash_value: str,
        parts: Mapping[str, Sequence[str]],
        rng: NumberGenerator,
    ) -> Dict[str, str]:
        """Choose one part file for each region.

        Args:
            hash_value (str):
                The identity hash.

            parts (dict):
                The available part files, by region.

            rng (avatarcache.icons.generators.base.NumberGenerator):
                The number generator for this build. It is shared with
                :py:meth:`render`.

        Returns:
            dict:
            A mapping of region names to part file names.
        """
        raise NotImplementedError('%r must implement select_parts()'
                                  % type(self).__name__)

    def render(
        self,
        hash_value: str,
        parts: Mapping[str, str],
        rng: NumberGenerator,
    ) -> Image.Image:
        """Compose the selected parts into an icon.

        Args:
            hash_value (str):
                The identity hash.

            parts (dict):
                The selected part file names, by region.

            rng (avatarcache.icons.generators.base.NumberGenerator):
                The number generator for this build.

        Returns:
            PIL.Image.Image:
            The composed image, at its native size.
        """
        raise NotImplementedError('%r must implement render()'
                                  % type(self).__name__)

    def _find_parts(self) -> Dict[str, List[str]]:
        parts: Dict[str, List[str]] = {
            region: []
            for region in self.regions
        }
        root = importlib_resources.files(self.parts_package)

        try:
            entries = list(root.joinpath(self.parts_dir).iterdir())
        except OSError as e:
            raise PartFilesNotFoundError(
                'Unable to list icon parts in "%s": %s' % (self.parts_dir, e))

        for entry in entries:
            m = _PART_NAME_RE.match(entry.name)

            if m and m.group('region') in parts:
                parts[m.group('region')].append(entry.name)

        for region, filenames in parts.items():
            if not filenames:
                raise PartFilesNotFoundError(
                    'No icon parts found for region "%s" in "%s"'
                    % (region, self.parts_dir))

            filenames.sort(key=natural_sort_key)

        logger.debug('Loaded %d icon parts from "%s"',
                     sum(len(filenames) for filenames in parts.values()),
                     self.parts_dir)

        return parts
