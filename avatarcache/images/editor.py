"""Resizing and re-encoding images with Pillow."""

from __future__ import annotations

import io
import logging
from typing import Optional, Union

from PIL import Image, ImageOps

from avatarcache.images.types import (GIF_IMAGE,
                                      JPEG_IMAGE,
                                      PIL_FORMAT,
                                      PNG_IMAGE)


logger = logging.getLogger(__name__)


def open_image(
    source: Union[str, bytes],
) -> Optional[Image.Image]:
    """Open an image from a path or from in-memory data.

    The image is fully loaded, so the source can be discarded afterward.

    Args:
        source (str or bytes):
            A filesystem path or the encoded image data.

    Returns:
        PIL.Image.Image:
        The image, or ``None`` if it could not be read.
    """
    try:
        if isinstance(source, bytes):
            image = Image.open(io.BytesIO(source))
        else:
            image = Image.open(source)

        image.load()
    except (OSError, Image.DecompressionBombError) as e:
        logger.warning('Unable to open image: %s', e)
        return None

    return image


def get_image_data(
    image: Optional[Image.Image],
    mimetype: str = PNG_IMAGE,
) -> bytes:
    """Encode an image.

    Args:
        image (PIL.Image.Image):
            The image to encode. ``None`` results in empty data.

        mimetype (str, optional):
            The target MIME type.

    Returns:
        bytes:
        The encoded image, or empty data on failure.
    """
    fmt = PIL_FORMAT.get(mimetype)

    if image is None or fmt is None:
        return b''

    if mimetype == JPEG_IMAGE and image.mode not in ('RGB', 'L'):
        image = _flatten(image)
    elif mimetype == GIF_IMAGE and image.mode not in ('P', 'L'):
        image = image.convert('RGB').convert('P',
                                             palette=Image.Palette.ADAPTIVE)

    out = io.BytesIO()

    try:
        image.save(out, format=fmt)
    except (OSError, ValueError) as e:
        logger.warning('Unable to encode image as %s: %s', mimetype, e)
        return b''

    return out.getvalue()


def get_resized_image_data(
    image: Optional[Image.Image],
    width: int,
    height: int,
    mimetype: str = PNG_IMAGE,
    crop: bool = False,
) -> bytes:
    """Resize and encode an image.

    By default, the whole image is scaled to the new dimensions. Images may
    be enlarged.

    Args:
        image (PIL.Image.Image):
            The image to resize. ``None`` results in empty data.

        width (int):
            The target width in pixels.

        height (int):
            The target height in pixels.

        mimetype (str, optional):
            The target MIME type.

        crop (bool, optional):
            Whether to crop the image to the target aspect ratio (keeping
            the center) instead of stretching it.

    Returns:
        bytes:
        The encoded image, or empty data on failure.
    """
    if image is None:
        return b''

    return get_image_data(resize(image, width, height, crop=crop), mimetype)


def resize(
    image: Image.Image,
    width: int,
    height: int,
    crop: bool = False,
) -> Image.Image:
    """Return a resized copy of an image.

    Args:
        image (PIL.Image.Image):
            The image to resize.

        width (int):
            The target width in pixels.

        height (int):
            The target height in pixels.

        crop (bool, optional):
            Whether to crop to the target aspect ratio instead of
            stretching.

    Returns:
        PIL.Image.Image:
        The resized image. If no resizing was needed, this is the original
        image.
    """
    if image.size == (width, height):
        return image

    if image.mode not in ('RGB', 'RGBA', 'L', 'LA'):
        image = image.convert('RGBA')

    if crop:
        return ImageOps.fit(image, (width, height), Image.Resampling.LANCZOS)

    return image.resize((width, height), Image.Resampling.LANCZOS)


def _flatten(
    image: Image.Image,
) -> Image.Image:
    """Composite an image with transparency onto a white background."""
    image = image.convert('RGBA')
    background = Image.new('RGB', image.size, (255, 255, 255))
    background.paste(image, mask=image.getchannel('A'))

    return background
