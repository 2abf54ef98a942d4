"""Unit tests for avatarcache.icons.providers."""

from __future__ import annotations

from django.templatetags.static import static
from django.test import override_settings

from avatarcache.errors import GenerationFailedError
from avatarcache.hashing import Hasher
from avatarcache.icons.generators.base import Generator
from avatarcache.icons.providers import (IconProvider,
                                         make_custom_provider,
                                         make_generating_provider,
                                         make_svg_provider)
from avatarcache.images.types import SVG_IMAGE
from avatarcache.testing.testcases import TestCase


HASH = 'ab' + '0' * 62


class DummyGenerator(Generator):
    mimetype = SVG_IMAGE

    def build(self, hash_value, size):
        return b'<svg>%d</svg>' % size


class BrokenGenerator(Generator):
    def build(self, hash_value, size):
        raise GenerationFailedError('missing parts')


class CrashingGenerator(Generator):
    def build(self, hash_value, size):
        raise RuntimeError('boom')


class IconProviderTests(TestCase):
    """Unit tests for avatarcache.icons.providers.IconProvider."""

    def test_init_without_types(self):
        """Testing IconProvider requires a type"""
        with self.assertRaises(ValueError):
            IconProvider(types=[], generator=DummyGenerator())

    def test_init_without_image(self):
        """Testing IconProvider requires a generator or a static image"""
        with self.assertRaises(ValueError):
            IconProvider(types=['dummy'])

    def test_types(self):
        """Testing IconProvider type names"""
        provider = make_svg_provider(['mystery', 'mm'], 'mystery',
                                     name='Mystery')

        self.assertEqual(provider.get_option_value(), 'mystery')
        self.assertEqual(provider.get_provided_types(), ('mystery', 'mm'))
        self.assertEqual(provider.get_name(), 'Mystery')
        self.assertTrue(provider.provides('mm'))
        self.assertFalse(provider.provides('wavatar'))

    def test_static(self):
        """Testing IconProvider with a static SVG image"""
        provider = make_svg_provider(['bubble', 'comment'], 'comment-bubble')

        self.assertTrue(provider.is_static)
        self.assertEqual(provider.get_static_url(),
                         static('avatarcache/images/comment-bubble.svg'))
        self.assertEqual(provider.build(HASH, 32), b'')

    def test_get_filename(self):
        """Testing IconProvider.get_filename for generated icons"""
        provider = make_generating_provider(['dummy', 'alias'],
                                            DummyGenerator())

        self.assertFalse(provider.is_static)
        self.assertIsNone(provider.get_static_url())
        self.assertEqual(provider.get_filename(HASH, 42),
                         'dummy/a/b/%s-42.svg' % HASH)

    def test_build(self):
        """Testing IconProvider.build"""
        provider = make_generating_provider(['dummy'], DummyGenerator())

        self.assertEqual(provider.build(HASH, 42), b'<svg>42</svg>')

    def test_build_generation_failed(self):
        """Testing IconProvider.build with GenerationFailedError"""
        provider = make_generating_provider(['broken'], BrokenGenerator())

        with self.assertLogs('avatarcache.icons.providers', 'WARNING'):
            self.assertEqual(provider.build(HASH, 42), b'')

    def test_build_unexpected_error(self):
        """Testing IconProvider.build with an unexpected exception"""
        provider = make_generating_provider(['broken'], CrashingGenerator())

        with self.assertLogs('avatarcache.icons.providers', 'ERROR'):
            self.assertEqual(provider.build(HASH, 42), b'')

    @override_settings(AVATAR_CACHE_SITE_ID=3)
    def test_custom_filename(self):
        """Testing make_custom_provider stores one icon per site and size"""
        hasher = Hasher(lambda: 'salt')
        provider = make_custom_provider(hasher)

        filename = provider.get_filename(HASH, 64)

        self.assertEqual(
            filename,
            'custom/3/%s-64.png' % hasher.get_hash('custom-default-3'))
        self.assertEqual(provider.get_filename('cd' + '0' * 62, 64),
                         filename)
        self.assertEqual(provider.get_static_url(),
                         static('avatarcache/images/blank.gif'))
