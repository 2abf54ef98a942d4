"""Geometric identicons in the style of Jdenticon.

The icon is a 4x4 grid of cells. The 8 side cells and 4 corner cells share
an "outer" shape, rotated around the icon, and the 4 middle cells share a
"center" shape. All shapes of one color are drawn into a single SVG path.
"""

from __future__ import annotations

from typing import Callable, Dict, List, NamedTuple, Optional, Sequence

from avatarcache.errors import GenerationFailedError
from avatarcache.icons.generators.base import Generator, parse_hash
from avatarcache.images.color import hsl_to_rgb, rgb_to_hex
from avatarcache.images.types import SVG_IMAGE


class Point(NamedTuple):
    """A point on the canvas."""

    x: float
    y: float


def _svg_value(
    value: float,
) -> str:
    """Format a coordinate for an SVG path, with at most one decimal."""
    value = round(value, 1)

    if value == int(value):
        return '%d' % value

    return '%s' % value


class Transform:
    """Translates and rotates points into a cell of the icon."""

    def __init__(
        self,
        x: float,
        y: float,
        size: float,
        rotation: int,
    ) -> None:
        """Initialize the transform.

        Args:
            x (float):
                The left edge of the cell.

            y (float):
                The top edge of the cell.

            size (float):
                The width and height of the cell.

            rotation (int):
                The number of quarter turns (0 to 3).
        """
        self.x = x
        self.y = y
        self.size = size
        self.rotation = rotation

    def transform_point(
        self,
        x: float,
        y: float,
        width: float = 0,
        height: float = 0,
    ) -> Point:
        """Transform a point relative to the cell.

        Args:
            x (float):
                The horizontal coordinate.

            y (float):
                The vertical coordinate.

            width (float, optional):
                The width of the object anchored at the point.

            height (float, optional):
                The height of the object anchored at the point.

        Returns:
            Point:
            The transformed point.
        """
        right = self.x + self.size
        bottom = self.y + self.size
        rotation = self.rotation

        if rotation == 1:
            return Point(right - y - height, self.y + x)
        elif rotation == 2:
            return Point(right - x - width, bottom - y - height)
        elif rotation == 3:
            return Point(self.x + y, bottom - x - width)
        else:
            return Point(self.x + x, self.y + y)


class SVGPath:
    """The data for a single SVG ``<path>`` element."""

    def __init__(self) -> None:
        self._data: List[str] = []

    def add_polygon(
        self,
        points: Sequence[Point],
    ) -> None:
        first, rest = points[0], points[1:]
        data = ['M%s %s' % (_svg_value(first.x), _svg_value(first.y))]
        data += [
            'L%s %s' % (_svg_value(point.x), _svg_value(point.y))
            for point in rest
        ]
        data.append('Z')

        self._data.append(''.join(data))

    def add_circle(
        self,
        origin: Point,
        diameter: float,
        counter_clockwise: bool,
    ) -> None:
        sweep = 0 if counter_clockwise else 1
        radius = _svg_value(diameter / 2)
        svg_diameter = _svg_value(diameter)

        self._data.append(
            'M%(x)s %(y)s'
            'a%(r)s,%(r)s 0 1,%(sweep)s %(d)s,0'
            'a%(r)s,%(r)s 0 1,%(sweep)s -%(d)s,0'
            % {
                'x': _svg_value(origin.x),
                'y': _svg_value(origin.y + diameter / 2),
                'r': radius,
                'd': svg_diameter,
                'sweep': sweep,
            })

    def __str__(self) -> str:
        return ''.join(self._data)


class SVGRenderer:
    """Collects shapes into one path per fill color."""

    def __init__(
        self,
        size: int,
    ) -> None:
        """Initialize the renderer.

        Args:
            size (int):
                The width and height of the icon.
        """
        self.size = size
        self.background: Optional[str] = None
        self._paths: Dict[str, SVGPath] = {}
        self._path: Optional[SVGPath] = None

    def begin_shape(
        self,
        color: str,
    ) -> None:
        self._path = self._paths.setdefault(color, SVGPath())

    def end_shape(self) -> None:
        self._path = None

    def add_polygon(
        self,
        points: Sequence[Point],
    ) -> None:
        assert self._path is not None
        self._path.add_polygon(points)

    def add_circle(
        self,
        origin: Point,
        diameter: float,
        counter_clockwise: bool,
    ) -> None:
        assert self._path is not None
        self._path.add_circle(origin, diameter, counter_clockwise)

    def to_svg(self) -> str:
        """Return the finished SVG document.

        Returns:
            str:
            The SVG markup.
        """
        size = self.size
        parts = [
            '<svg xmlns="http://www.w3.org/2000/svg" width="%d" height="%d" '
            'viewBox="0 0 %d %d" preserveAspectRatio="xMidYMid meet">'
            % (size, size, size, size),
        ]

        if self.background:
            parts.append('<rect width="100%%" height="100%%" fill="%s"/>'
                         % self.background)

        parts += [
            '<path fill="%s" d="%s"/>' % (color, path)
            for color, path in self._paths.items()
        ]
        parts.append('</svg>')

        return ''.join(parts)


class Graphics:
    """Draws primitive shapes through the current cell transform."""

    def __init__(
        self,
        renderer: SVGRenderer,
    ) -> None:
        self.renderer = renderer
        self.transform = Transform(0, 0, 0, 0)

    def add_polygon(
        self,
        points: Sequence[Point],
        invert: bool = False,
    ) -> None:
        if invert:
            points = list(reversed(points))

        self.renderer.add_polygon([
            self.transform.transform_point(point.x, point.y)
            for point in points
        ])

    def add_circle(
        self,
        x: float,
        y: float,
        size: float,
        invert: bool = False,
    ) -> None:
        self.renderer.add_circle(
            self.transform.transform_point(x, y, size, size),
            size,
            invert)

    def add_rectangle(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        invert: bool = False,
    ) -> None:
        self.add_polygon([
            Point(x, y),
            Point(x + width, y),
            Point(x + width, y + height),
            Point(x, y + height),
        ], invert)

    def add_triangle(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        rotation: int,
        invert: bool = False,
    ) -> None:
        """Add a right triangle.

        The triangle is the bounding rectangle with one corner cut away.
        ``rotation`` selects the corner that is removed.
        """
        points = [
            Point(x + width, y),
            Point(x + width, y + height),
            Point(x, y + height),
            Point(x, y),
        ]
        del points[rotation % 4]

        self.add_polygon(points, invert)

    def add_rhombus(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        invert: bool = False,
    ) -> None:
        self.add_polygon([
            Point(x + width / 2, y),
            Point(x + width, y + height / 2),
            Point(x + width / 2, y + height),
            Point(x, y + height / 2),
        ], invert)


#: A shape drawing function, taking the graphics, cell size and position.
Shape = Callable[[Graphics, float, int], None]


def _cut_corner(g: Graphics, cell: float, index: int) -> None:
    k = cell * 0.42
    g.add_polygon([
        Point(0, 0),
        Point(cell, 0),
        Point(cell, cell - k * 2),
        Point(cell - k, cell),
        Point(0, cell),
    ])


def _side_triangle(g: Graphics, cell: float, index: int) -> None:
    w = int(cell * 0.5)
    h = int(cell * 0.8)
    g.add_triangle(cell - w, 0, w, h, 2)


def _middle_square(g: Graphics, cell: float, index: int) -> None:
    s = int(cell / 3)
    g.add_rectangle(s, s, cell - s, cell - s)


def _corner_square(g: Graphics, cell: float, index: int) -> None:
    inner = cell * 0.1

    if inner > 1:
        inner = int(inner)
    elif inner > 0.5:
        inner = 1

    if cell < 6:
        outer = 1
    elif cell < 8:
        outer = 2
    else:
        outer = int(cell * 0.25)

    g.add_rectangle(outer, outer, cell - inner - outer, cell - inner - outer)


def _off_center_circle(g: Graphics, cell: float, index: int) -> None:
    m = int(cell * 0.15)
    s = int(cell * 0.5)
    g.add_circle(cell - s - m, cell - s - m, s)


def _negative_triangle(g: Graphics, cell: float, index: int) -> None:
    inner = cell * 0.1
    outer = inner * 4

    # Align the edge to the nearest pixel in large icons.
    if outer > 3:
        outer = int(outer)

    g.add_rectangle(0, 0, cell, cell)
    g.add_polygon([
        Point(outer, outer),
        Point(cell - inner, outer),
        Point(outer + (cell - outer - inner) / 2, cell - inner),
    ], True)


def _cut_square(g: Graphics, cell: float, index: int) -> None:
    g.add_polygon([
        Point(0, 0),
        Point(cell, 0),
        Point(cell, cell * 0.7),
        Point(cell * 0.4, cell * 0.4),
        Point(cell * 0.7, cell),
        Point(0, cell),
    ])


def _half_triangle(g: Graphics, cell: float, index: int) -> None:
    g.add_triangle(cell / 2, cell / 2, cell / 2, cell / 2, 3)


def _corner_plus_triangle(g: Graphics, cell: float, index: int) -> None:
    g.add_rectangle(0, 0, cell, cell / 2)
    g.add_rectangle(0, cell / 2, cell / 2, cell / 2)
    g.add_triangle(cell / 2, cell / 2, cell / 2, cell / 2, 1)


def _negative_square(g: Graphics, cell: float, index: int) -> None:
    inner = cell * 0.14

    if cell < 4:
        outer = 1
    elif cell < 6:
        outer = 2
    else:
        outer = int(cell * 0.35)

    if cell >= 8:
        inner = int(inner)

    g.add_rectangle(0, 0, cell, cell)
    g.add_rectangle(outer, outer, cell - outer - inner, cell - outer - inner,
                    True)


def _negative_circle(g: Graphics, cell: float, index: int) -> None:
    inner = cell * 0.12
    outer = inner * 3

    g.add_rectangle(0, 0, cell, cell)
    g.add_circle(outer, outer, cell - inner - outer, True)


def _negative_rhombus(g: Graphics, cell: float, index: int) -> None:
    m = cell * 0.25

    g.add_rectangle(0, 0, cell, cell)
    g.add_rhombus(m, m, cell - m, cell - m, True)


def _conditional_circle(g: Graphics, cell: float, index: int) -> None:
    m = cell * 0.4
    s = cell * 1.2

    if not index:
        g.add_circle(m, m, s)


def _triangle(g: Graphics, cell: float, index: int) -> None:
    g.add_triangle(0, 0, cell, cell, 0)


def _bottom_half_triangle(g: Graphics, cell: float, index: int) -> None:
    g.add_triangle(0, cell / 2, cell, cell / 2, 0)


def _rhombus(g: Graphics, cell: float, index: int) -> None:
    g.add_rhombus(0, 0, cell, cell)


def _circle(g: Graphics, cell: float, index: int) -> None:
    m = cell / 6
    g.add_circle(m, m, cell - 2 * m)


#: Shapes for the four middle cells.
CENTER_SHAPES: Sequence[Shape] = (
    _cut_corner,
    _side_triangle,
    _middle_square,
    _corner_square,
    _off_center_circle,
    _negative_triangle,
    _cut_square,
    _half_triangle,
    _corner_plus_triangle,
    _negative_square,
    _negative_circle,
    _half_triangle,
    _negative_rhombus,
    _conditional_circle,
)

#: Shapes for the side and corner cells.
OUTER_SHAPES: Sequence[Shape] = (
    _triangle,
    _bottom_half_triangle,
    _rhombus,
    _circle,
)


class ColorTheme:
    """The five-color palette derived from a hue."""

    DARK_GRAY = 0
    MID_COLOR = 1
    LIGHT_GRAY = 2
    LIGHT_COLOR = 3
    DARK_COLOR = 4

    COLOR_LIGHTNESS_RANGE = (0.4, 0.8)
    GRAYSCALE_LIGHTNESS_RANGE = (0.3, 0.9)

    #: The perceived middle lightness for each sixth of the color wheel.
    LIGHTNESS_CORRECTORS = (0.55, 0.5, 0.5, 0.46, 0.6, 0.55, 0.55)

    @classmethod
    def get_rgb_colors(
        cls,
        hue: float,
        saturation: float = 0.5,
    ) -> List[str]:
        """Return the palette for a hue.

        Args:
            hue (float):
                The hue, as a fraction of the color wheel (0 to 1).

            saturation (float, optional):
                The saturation of the colored entries (0 to 1).

        Returns:
            list of str:
            The ``#rrggbb`` colors, indexed by the palette constants.
        """
        gray = cls.GRAYSCALE_LIGHTNESS_RANGE
        color = cls.COLOR_LIGHTNESS_RANGE

        return [
            cls._to_rgb(0, 0, cls._get_lightness(0, gray)),
            cls._to_corrected_rgb(hue, saturation,
                                  cls._get_lightness(0.5, color)),
            cls._to_rgb(0, 0, cls._get_lightness(1, gray)),
            cls._to_corrected_rgb(hue, saturation,
                                  cls._get_lightness(1, color)),
            cls._to_corrected_rgb(hue, saturation,
                                  cls._get_lightness(0, color)),
        ]

    @staticmethod
    def _get_lightness(
        value: float,
        lightness_range: Sequence[float],
    ) -> float:
        low, high = lightness_range
        value = low + value * (high - low)

        return min(max(value, 0.0), 1.0)

    @staticmethod
    def _to_rgb(
        hue: float,
        saturation: float,
        lightness: float,
    ) -> str:
        return rgb_to_hex(hsl_to_rgb(int(hue * 360),
                                     int(saturation * 100),
                                     int(lightness * 100)))

    @classmethod
    def _to_corrected_rgb(
        cls,
        hue: float,
        saturation: float,
        lightness: float,
    ) -> str:
        corrector = cls.LIGHTNESS_CORRECTORS[int(hue * 6 + 0.5)]

        if lightness < 0.5:
            lightness = lightness * corrector * 2
        else:
            lightness = corrector + (lightness - 0.5) * (1 - corrector) * 2

        return cls._to_rgb(hue, saturation, lightness)


class JdenticonGenerator(Generator):
    """Generates geometric SVG identicons."""

    mimetype = SVG_IMAGE

    #: The fraction of the icon size left empty around the icon.
    padding: float = 0.08

    #: The side cells, in drawing order.
    SIDE_POSITIONS = (
        (1, 0), (2, 0), (2, 3), (1, 3),
        (0, 1), (3, 1), (3, 2), (0, 2),
    )

    #: The corner cells, in drawing order.
    CORNER_POSITIONS = ((0, 0), (3, 0), (3, 3), (0, 3))

    #: The middle cells, in drawing order.
    CENTER_POSITIONS = ((1, 1), (2, 1), (2, 2), (1, 2))

    def build(
        self,
        hash_value: str,
        size: int,
    ) -> bytes:
        """Build an identicon.

        Args:
            hash_value (str):
                The identity hash. At least 11 hex digits are needed.

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
            return self._render(hash_value, size).encode('utf-8')
        except ValueError as e:
            raise GenerationFailedError(
                'Unable to build identicon for "%s": %s' % (hash_value, e))

    def _render(
        self,
        hash_value: str,
        size: int,
    ) -> str:
        renderer = SVGRenderer(size)
        graphics = Graphics(renderer)

        padding = int(size * self.padding)
        inner_size = size - padding * 2

        # Cells are whole pixels, so center the slightly smaller icon.
        cell = int(inner_size / 4)
        offset = padding + inner_size / 2 - cell * 2

        hue = parse_hash(hash_value, -7) / 16
        colors = ColorTheme.get_rgb_colors(hue)
        selected: List[int] = []

        for i in range(3):
            index = parse_hash(hash_value, 8 + i) % len(colors)

            if (self._is_duplicate(selected, index,
                                   (ColorTheme.DARK_GRAY,
                                    ColorTheme.DARK_COLOR)) or
                self._is_duplicate(selected, index,
                                   (ColorTheme.LIGHT_GRAY,
                                    ColorTheme.LIGHT_COLOR))):
                index = ColorTheme.MID_COLOR

            selected.append(index)

        shapes = [
            (OUTER_SHAPES, 2, 3, self.SIDE_POSITIONS),
            (OUTER_SHAPES, 4, 5, self.CORNER_POSITIONS),
            (CENTER_SHAPES, 1, None, self.CENTER_POSITIONS),
        ]

        for color_index, (shape_list, shape_offset, rotation_offset,
                          positions) in enumerate(shapes):
            shape = shape_list[parse_hash(hash_value, shape_offset) %
                               len(shape_list)]

            if rotation_offset is None:
                rotation = 0
            else:
                rotation = parse_hash(hash_value, rotation_offset)

            renderer.begin_shape(colors[selected[color_index]])

            for i, (x, y) in enumerate(positions):
                rotation += 1
                graphics.transform = Transform(offset + x * cell,
                                               offset + y * cell,
                                               cell,
                                               rotation % 4)
                shape(graphics, cell, i)

            renderer.end_shape()

        return renderer.to_svg()

    @staticmethod
    def _is_duplicate(
        selected: List[int],
        index: int,
        values: Sequence[int],
    ) -> bool:
        """Return whether a color would clash with one already selected."""
        return index in values and any(value in selected for value in values)
