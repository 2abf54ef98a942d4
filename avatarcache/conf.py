"""Access to avatarcache settings.

All values are read from :py:data:`django.conf.settings` at call time, so
changes made through :py:func:`django.test.override_settings` are honored.
"""

from __future__ import annotations

import os
from typing import List, Optional

from django.conf import settings


#: The name of the cache directory inside ``MEDIA_ROOT``.
CACHE_DIR = 'avatar-privacy'


def get_cache_root() -> str:
    """Return the filesystem path of the avatar cache.

    Returns:
        str:
        The value of ``AVATAR_CACHE_ROOT``, or a directory inside
        ``MEDIA_ROOT``.
    """
    root = getattr(settings, 'AVATAR_CACHE_ROOT', None)

    if not root:
        root = os.path.join(settings.MEDIA_ROOT, CACHE_DIR)

    return root


def get_cache_url() -> str:
    """Return the public base URL of the avatar cache.

    Returns:
        str:
        The base URL, always ending with ``/``.
    """
    url = getattr(settings, 'AVATAR_CACHE_URL', None)

    if not url:
        url = '%s%s/' % (settings.MEDIA_URL or '/', CACHE_DIR)

    if not url.endswith('/'):
        url += '/'

    return url


def get_salt() -> str:
    """Return the salt used when hashing identifiers.

    Returns:
        str:
        The value of ``AVATAR_CACHE_SALT``, falling back to ``SECRET_KEY``.
    """
    return getattr(settings, 'AVATAR_CACHE_SALT', None) or settings.SECRET_KEY


def get_http_timeout() -> float:
    """Return the timeout for outbound HTTP requests, in seconds."""
    return getattr(settings, 'AVATAR_CACHE_HTTP_TIMEOUT', 5)


def get_allow_remote() -> bool:
    """Return whether image URLs on other hosts are accepted."""
    return getattr(settings, 'AVATAR_CACHE_ALLOW_REMOTE', False)


def get_local_hosts() -> List[str]:
    """Return the hosts considered local when validating image URLs.

    Returns:
        list of str:
        The value of ``AVATAR_CACHE_LOCAL_HOSTS``, or the non-wildcard
        entries of ``ALLOWED_HOSTS``.
    """
    hosts = getattr(settings, 'AVATAR_CACHE_LOCAL_HOSTS', None)

    if hosts is None:
        hosts = [
            host
            for host in getattr(settings, 'ALLOWED_HOSTS', [])
            if host and '*' not in host and not host.startswith('.')
        ]

    return list(hosts)


def get_custom_default_path() -> Optional[str]:
    """Return the path of the image used for the ``custom`` default icon."""
    return getattr(settings, 'AVATAR_CACHE_CUSTOM_DEFAULT', None)


def get_site_id() -> int:
    """Return the site ID used to namespace custom default icons."""
    return getattr(settings, 'AVATAR_CACHE_SITE_ID',
                   getattr(settings, 'SITE_ID', 1))


def get_gravatar_rating() -> str:
    """Return the audience rating sent to Gravatar."""
    return getattr(settings, 'GRAVATAR_RATING', 'g')
