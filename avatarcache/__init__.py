"""Deterministic avatar generation and caching for Django sites."""

#: The version of avatarcache.
#:
#: This is in the format of:
#:
#:     (Major, Minor, Micro, alpha/beta/rc/final, Release Number, Released)
VERSION = (1, 0, 0, 'beta', 1, False)


def get_version_string():
    """Return a human-readable version string.

    Returns:
        str:
        The version, such as ``1.0 beta 1 (dev)``.
    """
    major, minor, micro, tag, release_num, released = VERSION
    parts = ['%s.%s' % (major, minor)]

    if micro:
        parts[0] += '.%s' % micro

    if tag == 'rc':
        parts.append('RC%s' % release_num)
    elif tag != 'final':
        parts.append('%s %s' % (tag, release_num))

    if not released:
        parts.append('(dev)')

    return ' '.join(parts)


def get_package_version():
    """Return the version in a form suitable for packaging.

    Returns:
        str:
        The PEP 440 version, such as ``1.0b1``.
    """
    major, minor, micro, tag, release_num = VERSION[:5]
    version = '%d.%d' % (major, minor)

    if micro:
        version += '.%d' % micro

    if tag != 'final':
        version += '%s%s' % ({'alpha': 'a', 'beta': 'b'}.get(tag, tag),
                             release_num)

    return version


def is_release():
    """Return whether this is a released version.

    Returns:
        bool:
        ``True`` for released versions.
    """
    return VERSION[5]


__version_info__ = VERSION[:-1]
__version__ = get_package_version()
