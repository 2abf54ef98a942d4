"""Site-wide custom default icons."""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional

from avatarcache.conf import get_custom_default_path
from avatarcache.errors import GenerationFailedError
from avatarcache.icons.generators.base import Generator
from avatarcache.images.editor import get_resized_image_data, open_image
from avatarcache.images.types import SVG_IMAGE, get_mimetype


logger = logging.getLogger(__name__)


class CustomImageGenerator(Generator):
    """Resizes a configured image for use as everybody's default icon.

    Unlike the other generators, the output doesn't depend on the hash.
    Raster images are cropped to a square. SVG images are passed through
    unchanged.
    """

    def __init__(
        self,
        path_func: Optional[Callable[[], Optional[str]]] = None,
    ) -> None:
        """Initialize the generator.

        Args:
            path_func (callable, optional):
                A function returning the path of the image. Defaults to
                :py:func:`avatarcache.conf.get_custom_default_path`.
        """
        self._path_func = path_func or get_custom_default_path

    def get_path(self) -> Optional[str]:
        """Return the path of the configured image, if any."""
        return self._path_func() or None

    @property
    def mimetype(self) -> str:
        """The MIME type of the configured image."""
        path = self.get_path()

        return get_mimetype(os.path.splitext(path)[1] if path else '')

    def build(
        self,
        hash_value: str,
        size: int,
    ) -> bytes:
        """Return the configured image at the requested size.

        Args:
            hash_value (str):
                The identity hash. This is ignored.

            size (int):
                The width and height of the icon, in pixels.

        Returns:
            bytes:
            The image data.

        Raises:
            avatarcache.errors.GenerationFailedError:
                No image is configured, or it could not be read.
        """
        path = self.get_path()

        if not path:
            raise GenerationFailedError('No custom default icon is set.')

        mimetype = self.mimetype

        if mimetype == SVG_IMAGE:
            try:
                with open(path, 'rb') as fp:
                    data = fp.read()
            except OSError as e:
                raise GenerationFailedError(
                    'Unable to read custom default icon "%s": %s' % (path, e))
        else:
            data = get_resized_image_data(open_image(path), size, size,
                                          mimetype, crop=True)

        if not data:
            raise GenerationFailedError(
                'Unable to resize custom default icon "%s".' % path)

        return data
