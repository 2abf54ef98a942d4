"""Access to the Gravatar service."""

from __future__ import annotations

import logging
from hashlib import md5
from typing import Optional
from urllib.parse import urlencode

import requests
from django.core.cache import cache

from avatarcache.conf import get_gravatar_rating, get_http_timeout
from avatarcache.errors import FetchFailedError, InvalidMimeTypeError
from avatarcache.images.types import JPEG_IMAGE, PNG_IMAGE, get_extension
from avatarcache.services.http import get_content_type, get_session


logger = logging.getLogger(__name__)


MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY


class GravatarService:
    """Fetches and validates Gravatar images.

    Gravatar is asked never to return its own default images, so a missing
    Gravatar results in a 404 and no data.
    """

    #: The base URL for avatar images.
    base_url = 'https://secure.gravatar.com/avatar/'

    #: The MIME types accepted from Gravatar.
    allowed_mimetypes = {PNG_IMAGE, JPEG_IMAGE}

    #: The prefix for validation results in the Django cache.
    cache_key_prefix = 'avatarcache-gravatar-check-'

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

    @property
    def session(self) -> requests.Session:
        """The HTTP session used for requests."""
        return self._session or get_session()

    def get_hash(
        self,
        email: str,
    ) -> str:
        """Return the Gravatar hash of an e-mail address.

        Args:
            email (str):
                The e-mail address.

        Returns:
            str:
            The MD5 hex digest of the normalized address.
        """
        return md5(email.strip().lower().encode('utf-8')).hexdigest()

    def get_url(
        self,
        email: str,
        size: Optional[int] = 80,
        rating: Optional[str] = None,
        mimetype: Optional[str] = None,
    ) -> str:
        """Return the Gravatar URL for an e-mail address.

        Args:
            email (str):
                The e-mail address.

            size (int, optional):
                The size of the image, in pixels.

            rating (str, optional):
                The maximum audience rating. Defaults to the
                ``GRAVATAR_RATING`` setting.

            mimetype (str, optional):
                The image type to ask for. Gravatar picks the type if this
                isn't set.

        Returns:
            str:
            The URL.
        """
        params = [
            ('d', '404'),
            ('s', size or ''),
            ('r', rating or get_gravatar_rating()),
        ]

        path = self.get_hash(email)

        if mimetype:
            path = '%s.%s' % (path, get_extension(mimetype))

        return '%s%s?%s' % (self.base_url, path, urlencode(params))

    def get_image(
        self,
        email: str,
        size: int,
        rating: Optional[str] = None,
        mimetype: Optional[str] = None,
    ) -> bytes:
        """Download the Gravatar for an e-mail address.

        Args:
            email (str):
                The e-mail address.

            size (int):
                The size of the image, in pixels.

            rating (str, optional):
                The maximum audience rating.

            mimetype (str, optional):
                The MIME type the caller expects. If given, other image types
                are rejected.

        Returns:
            bytes:
            The image data, or empty data if there's no usable Gravatar.
        """
        try:
            return self.fetch_image(email, size, rating, mimetype)
        except InvalidMimeTypeError as e:
            logger.warning('Ignoring Gravatar response for size %s: %s',
                           size, e)
        except FetchFailedError as e:
            logger.info('Unable to fetch Gravatar: %s', e)

        return b''

    def fetch_image(
        self,
        email: str,
        size: int,
        rating: Optional[str] = None,
        mimetype: Optional[str] = None,
    ) -> bytes:
        """Download the Gravatar for an e-mail address.

        Args:
            email (str):
                The e-mail address.

            size (int):
                The size of the image, in pixels.

            rating (str, optional):
                The maximum audience rating.

            mimetype (str, optional):
                The MIME type the caller expects.

        Returns:
            bytes:
            The image data.

        Raises:
            avatarcache.errors.FetchFailedError:
                The request failed or returned no data.

            avatarcache.errors.InvalidMimeTypeError:
                The response was not an accepted image type. This usually
                means an error page from a proxy.
        """
        url = self.get_url(email, size, rating, mimetype)

        try:
            response = self.session.get(url, timeout=get_http_timeout())
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchFailedError('Request to %s failed: %s' % (url, e))

        content_type = get_content_type(response)

        if (content_type not in self.allowed_mimetypes or
            (mimetype and content_type != mimetype)):
            raise InvalidMimeTypeError(content_type)

        if not response.content:
            raise FetchFailedError('Empty response from %s' % url)

        return response.content

    def validate(
        self,
        email: str = '',
        age: int = 0,
    ) -> str:
        """Return whether an e-mail address has a Gravatar.

        Results are stored in the Django cache. Positive results are kept
        for a week. Negative results are kept for a shorter time the newer
        the identity is, since new users are likely to sign up soon.

        Args:
            email (str, optional):
                The e-mail address.

            age (int, optional):
                The age of the object the address belongs to (such as a
                comment), in seconds.

        Returns:
            str:
            The MIME type of the Gravatar, or an empty string if there is
            none or it couldn't be determined.
        """
        if not email:
            return ''

        key = '%s%s' % (self.cache_key_prefix, self.get_hash(email))
        result: Optional[str] = cache.get(key)

        if result is not None:
            return result

        result = self.ping(email)

        if result is not None:
            cache.set(key, result,
                      timeout=self.get_caching_duration(bool(result), age))

        return result or ''

    def ping(
        self,
        email: str,
    ) -> Optional[str]:
        """Ask Gravatar whether an e-mail address has an image.

        Args:
            email (str):
                The e-mail address.

        Returns:
            str:
            The MIME type of the image, an empty string if there is none, or
            ``None`` if the answer is unknown (and must not be cached).
        """
        url = self.get_url(email)

        try:
            response = self.session.head(url, timeout=get_http_timeout())
        except requests.RequestException as e:
            logger.warning('Unable to validate Gravatar at %s: %s', url, e)
            return None

        if response.status_code == 200:
            return get_content_type(response)
        elif response.status_code == 404:
            return ''
        else:
            logger.warning('Unexpected HTTP %s validating Gravatar at %s',
                           response.status_code, url)
            return None

    def get_caching_duration(
        self,
        found: bool,
        age: int,
    ) -> int:
        """Return how long a validation result is cached.

        Args:
            found (bool):
                Whether a Gravatar was found.

            age (int):
                The age of the object, in seconds.

        Returns:
            int:
            The duration in seconds.
        """
        if found or age > WEEK:
            return WEEK
        elif age > DAY:
            return DAY
        elif age > HOUR:
            return HOUR
        else:
            return 10 * MINUTE

