"""Management command for regenerating the MonsterID part bounds."""

from __future__ import annotations

import json

from django.core.management.base import BaseCommand, CommandError
from django.utils.translation import gettext as _

from avatarcache.icons.generators.monster_id import MonsterIDGenerator


class Command(BaseCommand):
    """Scans the MonsterID parts and writes their colorizable bounds.

    This needs to be run whenever the part files change. The result
    belongs in ``avatarcache/icons/parts/monster_id/bounds.json``.
    """

    help = _('Computes the colorizable bounds of the MonsterID parts.')

    def add_arguments(self, parser):
        """Add arguments to the command.

        Args:
            parser (argparse.ArgumentParser):
                The argument parser to add to.
        """
        parser.add_argument(
            '-o',
            '--output',
            action='store',
            dest='output',
            default=None,
            help=_('The file to write the bounds to. Defaults to standard '
                   'output.'))

    def handle(self, *args, **options):
        bounds = MonsterIDGenerator().compute_bounds()
        data = json.dumps(
            {
                filename: [list(x), list(y)]
                for filename, (x, y) in sorted(bounds.items())
            },
            indent=2,
            sort_keys=True)

        output = options['output']

        if output:
            try:
                with open(output, 'w', encoding='utf-8') as fp:
                    fp.write(data)
                    fp.write('\n')
            except OSError as e:
                raise CommandError(_('Unable to write "%s": %s')
                                   % (output, e))
        else:
            self.stdout.write(data)
