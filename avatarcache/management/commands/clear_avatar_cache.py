"""Management command for removing files from the avatar cache."""

from __future__ import annotations

import re

from django.core.management.base import BaseCommand, CommandError
from django.utils.translation import gettext as _

from avatarcache.cache.filesystem import FilesystemCache


class Command(BaseCommand):
    """Removes cached avatars, optionally filtered by path and age."""

    help = _('Removes files from the avatar cache.')

    def add_arguments(self, parser):
        """Add arguments to the command.

        Args:
            parser (argparse.ArgumentParser):
                The argument parser to add to.
        """
        parser.add_argument(
            '--subdir',
            action='store',
            dest='subdir',
            default='',
            help=_('The cache subdirectory to clean up, such as '
                   '"gravatar" or "custom/1". Defaults to the whole '
                   'cache.'))
        parser.add_argument(
            '--regex',
            action='store',
            dest='regex',
            default='',
            help=_('Only remove files whose full path matches this '
                   'regular expression.'))
        parser.add_argument(
            '--age',
            action='store',
            dest='age',
            type=int,
            default=None,
            help=_('Only remove files older than this many seconds.'))

    def handle(self, *args, **options):
        subdir = options['subdir']
        regex = options['regex']
        age = options['age']

        if regex:
            try:
                regex = re.compile(regex)
            except re.error as e:
                raise CommandError(_('Invalid regular expression "%s": %s')
                                   % (regex, e))

        if age is not None and age < 0:
            raise CommandError(_('--age must not be negative'))

        cache = FilesystemCache()

        if age is None:
            cache.invalidate(subdir=subdir, regex=regex or None)
        else:
            cache.invalidate_older_than(age, subdir=subdir,
                                        regex=regex or None)

        self.stdout.write(_('Cleaned up "%s".')
                          % (subdir or cache.get_base_dir()))
