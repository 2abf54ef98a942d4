"""MIME types and file extensions for supported images."""

from __future__ import annotations

from typing import Dict

from typing_extensions import Final


JPEG_IMAGE: Final[str] = 'image/jpeg'
PNG_IMAGE: Final[str] = 'image/png'
GIF_IMAGE: Final[str] = 'image/gif'
SVG_IMAGE: Final[str] = 'image/svg+xml'

JPEG_EXTENSION: Final[str] = 'jpg'
JPEG_ALT_EXTENSION: Final[str] = 'jpeg'
PNG_EXTENSION: Final[str] = 'png'
GIF_EXTENSION: Final[str] = 'gif'
SVG_EXTENSION: Final[str] = 'svg'


#: A mapping of file extensions to MIME types.
CONTENT_TYPE: Final[Dict[str, str]] = {
    JPEG_EXTENSION: JPEG_IMAGE,
    JPEG_ALT_EXTENSION: JPEG_IMAGE,
    PNG_EXTENSION: PNG_IMAGE,
    GIF_EXTENSION: GIF_IMAGE,
    SVG_EXTENSION: SVG_IMAGE,
}

#: A mapping of MIME types to the file extension used when caching.
FILE_EXTENSION: Final[Dict[str, str]] = {
    JPEG_IMAGE: JPEG_EXTENSION,
    PNG_IMAGE: PNG_EXTENSION,
    GIF_IMAGE: GIF_EXTENSION,
    SVG_IMAGE: SVG_EXTENSION,
}

#: A mapping of raster MIME types to Pillow format names.
PIL_FORMAT: Final[Dict[str, str]] = {
    JPEG_IMAGE: 'JPEG',
    PNG_IMAGE: 'PNG',
    GIF_IMAGE: 'GIF',
}


def get_extension(
    mimetype: str,
) -> str:
    """Return the cache file extension for a MIME type.

    Args:
        mimetype (str):
            The MIME type.

    Returns:
        str:
        The extension, falling back to ``png`` for unknown types.
    """
    return FILE_EXTENSION.get(mimetype, PNG_EXTENSION)


def get_mimetype(
    extension: str,
) -> str:
    """Return the MIME type for a file extension.

    Args:
        extension (str):
            The extension, with or without a leading dot.

    Returns:
        str:
        The MIME type, falling back to ``image/png`` for unknown extensions.
    """
    return CONTENT_TYPE.get(extension.lstrip('.').lower(), PNG_IMAGE)
