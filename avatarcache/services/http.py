"""Shared HTTP session for outbound image requests."""

from __future__ import annotations

import threading
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from avatarcache import get_package_version


#: The number of retries for idempotent requests.
RETRY_TOTAL = 2

#: The backoff factor between retries.
RETRY_BACKOFF_FACTOR = 0.3

#: The User-Agent sent with every request.
USER_AGENT = 'avatarcache/%s' % get_package_version()


_session: Optional[requests.Session] = None
_session_lock = threading.Lock()


def build_session() -> requests.Session:
    """Return a new session with retries for transient server errors.

    Returns:
        requests.Session:
        The configured session.
    """
    session = requests.Session()
    retry = Retry(total=RETRY_TOTAL,
                  backoff_factor=RETRY_BACKOFF_FACTOR,
                  status_forcelist=(429, 500, 502, 503, 504),
                  allowed_methods=('GET', 'HEAD'),
                  raise_on_status=False)
    adapter = HTTPAdapter(max_retries=retry)

    session.mount('https://', adapter)
    session.mount('http://', adapter)
    session.headers.update({'User-Agent': USER_AGENT})

    return session


def get_session() -> requests.Session:
    """Return the shared session, creating it on first use.

    Returns:
        requests.Session:
        The session.
    """
    global _session

    with _session_lock:
        if _session is None:
            _session = build_session()

        return _session


def get_content_type(
    response: requests.Response,
) -> str:
    """Return the MIME type of a response, without parameters.

    Args:
        response (requests.Response):
            The response.

    Returns:
        str:
        The lower-cased MIME type, or an empty string.
    """
    content_type = response.headers.get('Content-Type', '')

    return content_type.split(';', 1)[0].strip().lower()
