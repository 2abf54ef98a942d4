"""Validation and retrieval of arbitrary image URLs."""

from __future__ import annotations

import logging
from typing import Optional, Sequence
from urllib.parse import urlsplit

import requests
from django.core.exceptions import ValidationError
from django.core.validators import URLValidator
from django.utils.http import url_has_allowed_host_and_scheme

from avatarcache.conf import (get_allow_remote,
                              get_http_timeout,
                              get_local_hosts)
from avatarcache.errors import FetchFailedError, InvalidSourceURLError
from avatarcache.images.editor import get_resized_image_data, open_image
from avatarcache.images.types import PNG_IMAGE
from avatarcache.services.http import get_session


logger = logging.getLogger(__name__)


class RemoteImageService:
    """Fetches images from URLs and re-encodes them at a given size."""

    #: The largest response accepted, in bytes.
    max_content_length = 5 * 1024 * 1024

    #: The number of bytes read from the response at a time.
    chunk_size = 64 * 1024

    def __init__(
        self,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the service.

        Args:
            session (requests.Session, optional):
                The HTTP session to use. Defaults to the shared session.
        """
        self._session = session
        self._url_validator = URLValidator(schemes=['http', 'https'])

    @property
    def session(self) -> requests.Session:
        """The HTTP session used for requests."""
        return self._session or get_session()

    def check_image_url(
        self,
        url: str,
        context: str = '',
        allow_remote: Optional[bool] = None,
        local_hosts: Optional[Sequence[str]] = None,
    ) -> None:
        """Check that a URL may be used as an image source.

        The URL must be an absolute ``http`` or ``https`` URL with a path.
        Unless remote URLs are allowed, it must also point to one of the
        site's own hosts.

        Args:
            url (str):
                The URL to check.

            context (str, optional):
                What the URL is used for, such as ``default`` or ``legacy``.
                This is only used for logging.

            allow_remote (bool, optional):
                Whether other hosts are accepted. Defaults to the
                ``AVATAR_CACHE_ALLOW_REMOTE`` setting.

            local_hosts (list of str, optional):
                The site's own hosts. Defaults to
                :py:func:`avatarcache.conf.get_local_hosts`.

        Raises:
            avatarcache.errors.InvalidSourceURLError:
                The URL is not acceptable.
        """
        if not url:
            raise InvalidSourceURLError('No %s URL was given.' % context)

        try:
            self._url_validator(url)
        except ValidationError:
            raise InvalidSourceURLError('"%s" is not a valid %s URL.'
                                        % (url, context))

        if not urlsplit(url).path.strip('/'):
            raise InvalidSourceURLError('The %s URL "%s" has no path.'
                                        % (context, url))

        if allow_remote is None:
            allow_remote = get_allow_remote()

        if not allow_remote:
            if local_hosts is None:
                local_hosts = get_local_hosts()

            if not url_has_allowed_host_and_scheme(
                url,
                allowed_hosts=set(local_hosts)):
                raise InvalidSourceURLError(
                    'The %s URL "%s" is not on this site.' % (context, url))

    def validate_image_url(
        self,
        url: str,
        context: str = '',
        allow_remote: Optional[bool] = None,
        local_hosts: Optional[Sequence[str]] = None,
    ) -> bool:
        """Return whether a URL may be used as an image source.

        See :py:meth:`check_image_url` for the rules.

        Args:
            url (str):
                The URL to check.

            context (str, optional):
                What the URL is used for.

            allow_remote (bool, optional):
                Whether other hosts are accepted.

            local_hosts (list of str, optional):
                The site's own hosts.

        Returns:
            bool:
            ``True`` if the URL is acceptable.
        """
        try:
            self.check_image_url(url, context, allow_remote, local_hosts)
        except InvalidSourceURLError as e:
            logger.debug('Rejecting image URL: %s', e)
            return False

        return True

    def get_image(
        self,
        url: str,
        size: int,
        mimetype: str = PNG_IMAGE,
    ) -> bytes:
        """Download an image and re-encode it at a square size.

        Args:
            url (str):
                The image URL.

            size (int):
                The width and height of the result, in pixels.

            mimetype (str, optional):
                The MIME type of the result.

        Returns:
            bytes:
            The image data, or empty data if the image couldn't be fetched
            or decoded.
        """
        try:
            data = self.fetch(url)
        except FetchFailedError as e:
            logger.warning('Unable to fetch image: %s', e)
            return b''

        return get_resized_image_data(open_image(data), size, size, mimetype)

    def fetch(
        self,
        url: str,
    ) -> bytes:
        """Download the raw data at a URL.

        The body is streamed, and the download stops as soon as it's known
        to exceed :py:attr:`max_content_length`.

        Args:
            url (str):
                The URL.

        Returns:
            bytes:
            The response body.

        Raises:
            avatarcache.errors.FetchFailedError:
                The request failed, or the body was empty or too large.
        """
        max_length = self.max_content_length

        try:
            response = self.session.get(url,
                                        timeout=get_http_timeout(),
                                        stream=True)
        except requests.RequestException as e:
            raise FetchFailedError('Request to %s failed: %s' % (url, e))

        with response:
            try:
                response.raise_for_status()
            except requests.RequestException as e:
                raise FetchFailedError('Request to %s failed: %s' % (url, e))

            content_length = response.headers.get('Content-Length', '')

            if content_length.isdigit() and int(content_length) > max_length:
                raise FetchFailedError(
                    'Response from %s is too large (%s bytes)'
                    % (url, content_length))

            data = bytearray()

            try:
                for chunk in response.iter_content(self.chunk_size):
                    data += chunk

                    if len(data) > max_length:
                        raise FetchFailedError(
                            'Response from %s is larger than %d bytes'
                            % (url, max_length))
            except requests.RequestException as e:
                raise FetchFailedError('Unable to read the response from '
                                       '%s: %s' % (url, e))

        if not data:
            raise FetchFailedError('Empty response from %s' % url)

        return bytes(data)
