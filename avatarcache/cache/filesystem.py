"""A sharded, path-addressed file cache.

Files are addressed by a relative path of the form
``{namespace}/{shard}/{hash}-{size}.{ext}``. The relative path is the real
contract. The cache root and the public URL are only prefixes.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
import time
from typing import Optional, Pattern, Union

from django.core.exceptions import SuspiciousFileOperation
from django.core.files import locks

from avatarcache.conf import get_cache_root, get_cache_url
from avatarcache.errors import CacheWriteFailedError, StorageUnavailableError


logger = logging.getLogger(__name__)


#: A regex, either as a string or compiled.
RegexType = Union[str, Pattern[str]]


def get_shard(
    hash_value: str,
) -> str:
    """Return the shard directory for an identity hash.

    The first two hex characters become two single-character path
    segments, limiting each directory to 16 entries per level.

    Args:
        hash_value (str):
            The identity hash.

    Returns:
        str:
        The shard path, such as ``f/0``.
    """
    return '/'.join(hash_value[:2])


def safe_join(
    base: str,
    *paths: str,
) -> str:
    """Join paths, ensuring the result stays within the base path.

    Args:
        base (str):
            The base directory.

        *paths (tuple of str):
            The relative path components.

    Returns:
        str:
        The absolute joined path.

    Raises:
        django.core.exceptions.SuspiciousFileOperation:
            The joined path escapes the base directory.
    """
    abs_base = os.path.abspath(base)
    result = os.path.abspath(os.path.join(abs_base, *paths))

    if (result != abs_base and
        not result.startswith(abs_base + os.sep)):
        raise SuspiciousFileOperation(
            'The path %r is located outside of the cache root %r.'
            % (result, abs_base))

    return result


class FilesystemCache:
    """Stores byte blobs under relative paths below a cache root.

    Writes are atomic: data goes to a locked temporary file in the target
    directory, which is then moved into place. A cache entry is therefore
    either fully present or absent.
    """

    #: The permissions given to cached files.
    file_mode = 0o644

    def __init__(
        self,
        root: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        """Initialize the cache.

        Args:
            root (str, optional):
                The cache root. Defaults to ``AVATAR_CACHE_ROOT``.

            base_url (str, optional):
                The public URL of the cache root. Defaults to
                ``AVATAR_CACHE_URL``.
        """
        self._root = root
        self._base_url = base_url
        self._base_dir: Optional[str] = None

    def get_base_dir(self) -> str:
        """Return the cache root, creating it if needed.

        Returns:
            str:
            The absolute path of the cache root.

        Raises:
            avatarcache.errors.StorageUnavailableError:
                The directory could not be created.
        """
        if self._base_dir is None:
            base_dir = os.path.abspath(self._root or get_cache_root())

            try:
                os.makedirs(base_dir, exist_ok=True)
            except OSError as e:
                raise StorageUnavailableError(
                    'Unable to create the avatar cache directory "%s": %s'
                    % (base_dir, e))

            self._base_dir = base_dir

        return self._base_dir

    def get_path(
        self,
        relative_path: str,
    ) -> str:
        """Return the absolute path for a relative cache path.

        Args:
            relative_path (str):
                The path relative to the cache root.

        Returns:
            str:
            The absolute path.

        Raises:
            django.core.exceptions.SuspiciousFileOperation:
                The path escapes the cache root.
        """
        return safe_join(self.get_base_dir(), relative_path)

    def get_url(
        self,
        relative_path: str,
    ) -> str:
        """Return the public URL for a relative cache path.

        This never touches the filesystem.

        Args:
            relative_path (str):
                The path relative to the cache root.

        Returns:
            str:
            The URL.
        """
        base_url = self._base_url or get_cache_url()

        if not base_url.endswith('/'):
            base_url += '/'

        return '%s%s' % (base_url, relative_path.lstrip('/'))

    def exists(
        self,
        relative_path: str,
    ) -> bool:
        """Return whether a file exists in the cache.

        Args:
            relative_path (str):
                The path relative to the cache root.

        Returns:
            bool:
            ``True`` if the file exists.
        """
        return os.path.isfile(self.get_path(relative_path))

    def get_mtime(
        self,
        relative_path: str,
    ) -> Optional[int]:
        """Return the modification time of a cached file.

        Args:
            relative_path (str):
                The path relative to the cache root.

        Returns:
            int:
            The modification time in seconds since the epoch, or ``None``
            if the file does not exist.
        """
        try:
            return int(os.path.getmtime(self.get_path(relative_path)))
        except OSError:
            return None

    def get(
        self,
        relative_path: str,
    ) -> Optional[bytes]:
        """Return the contents of a cached file.

        Args:
            relative_path (str):
                The path relative to the cache root.

        Returns:
            bytes:
            The file contents, or ``None`` if the file could not be read.
        """
        try:
            with open(self.get_path(relative_path), 'rb') as fp:
                return fp.read()
        except OSError:
            return None

    def set(
        self,
        relative_path: str,
        data: bytes,
        force: bool = False,
    ) -> bool:
        """Store data in the cache.

        If the file already exists and ``force`` is not set, nothing is
        written. Empty data is never written.

        Args:
            relative_path (str):
                The path relative to the cache root.

            data (bytes):
                The data to store.

            force (bool, optional):
                Whether to overwrite an existing file.

        Returns:
            bool:
            ``True`` if the file is now present in the cache.

        Raises:
            avatarcache.errors.StorageUnavailableError:
                The cache root could not be created.
        """
        try:
            path = self.get_path(relative_path)
        except SuspiciousFileOperation as e:
            logger.error('Refusing to cache "%s": %s', relative_path, e)
            return False

        if not force and os.path.isfile(path):
            return True

        if not data:
            return False

        try:
            self.write(path, data)
        except CacheWriteFailedError as e:
            logger.error('Unable to write "%s" to the avatar cache: %s',
                         relative_path, e)
            return False

        return True

    def write(
        self,
        path: str,
        data: bytes,
    ) -> None:
        """Atomically write data to a file in the cache.

        The data goes to a temporary file in the same directory, which then
        replaces the target. Readers never see a partial file.

        Args:
            path (str):
                The absolute path of the file.

            data (bytes):
                The data to write.

        Raises:
            avatarcache.errors.CacheWriteFailedError:
                The file could not be written. Nothing was left behind.
        """
        dirname = os.path.dirname(path)
        tmp_path: Optional[str] = None

        try:
            os.makedirs(dirname, exist_ok=True)

            fd, tmp_path = tempfile.mkstemp(dir=dirname, prefix='.tmp-')

            with os.fdopen(fd, 'wb') as fp:
                locks.lock(fp, locks.LOCK_EX)

                try:
                    fp.write(data)
                    fp.flush()
                    os.fsync(fp.fileno())
                finally:
                    locks.unlock(fp)

            os.chmod(tmp_path, self.file_mode)
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise CacheWriteFailedError(str(e))
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass

    def delete(
        self,
        relative_path: str,
    ) -> bool:
        """Delete a file from the cache.

        Args:
            relative_path (str):
                The path relative to the cache root.

        Returns:
            bool:
            ``True`` if the file was deleted.
        """
        try:
            path = self.get_path(relative_path)
        except SuspiciousFileOperation:
            return False

        if not os.path.isfile(path) or not os.access(path, os.W_OK):
            return False

        try:
            os.unlink(path)
        except OSError as e:
            logger.error('Unable to delete "%s" from the avatar cache: %s',
                         relative_path, e)
            return False

        return True

    def invalidate(
        self,
        subdir: str = '',
        regex: Optional[RegexType] = None,
    ) -> None:
        """Remove cached files below a subdirectory.

        Directories left empty are removed as well. Nothing happens if the
        subdirectory doesn't exist.

        Args:
            subdir (str, optional):
                The subdirectory to clean up. Defaults to the whole cache.

            regex (str or re.Pattern, optional):
                A pattern searched for in each file's full path. Only
                matching files are removed.
        """
        self._remove_files(subdir=subdir, regex=regex, max_age=None)

    def invalidate_older_than(
        self,
        age: int,
        subdir: str = '',
        regex: Optional[RegexType] = None,
    ) -> None:
        """Remove cached files that were modified too long ago.

        Args:
            age (int):
                The maximum age of kept files, in seconds.

            subdir (str, optional):
                The subdirectory to clean up. Defaults to the whole cache.

            regex (str or re.Pattern, optional):
                A pattern searched for in each file's full path. Only
                matching files are removed.
        """
        self._remove_files(subdir=subdir, regex=regex, max_age=age)

    def _remove_files(
        self,
        subdir: str,
        regex: Optional[RegexType],
        max_age: Optional[int],
    ) -> None:
        """Walk a subdirectory child-first, removing matching files.

        Args:
            subdir (str):
                The subdirectory to walk.

            regex (str or re.Pattern):
                The optional path filter.

            max_age (int):
                The optional maximum age of kept files, in seconds.
        """
        try:
            top = self.get_path(subdir)
        except SuspiciousFileOperation as e:
            logger.error('Refusing to invalidate "%s": %s', subdir, e)
            return

        if not os.path.isdir(top):
            return

        if isinstance(regex, str):
            regex = re.compile(regex) if regex else None

        now = time.time()

        for dirpath, dirnames, filenames in os.walk(top, topdown=False):
            for filename in filenames:
                path = os.path.join(dirpath, filename)

                if regex is not None and not regex.search(path):
                    continue

                try:
                    if (max_age is not None and
                        now - os.path.getmtime(path) <= max_age):
                        continue

                    os.unlink(path)
                except OSError as e:
                    logger.error('Unable to remove cached file "%s": %s',
                                 path, e)

            if dirpath != top:
                try:
                    os.rmdir(dirpath)
                except OSError:
                    # Still has files in it.
                    pass
