"""Unit tests for avatarcache.handlers.legacy."""

from __future__ import annotations

import hashlib
import io

import kgb
import requests
from django.test import override_settings
from PIL import Image

from avatarcache.handlers.legacy import LegacyIconHandler
from avatarcache.services.remote_images import RemoteImageService
from avatarcache.testing.testcases import TestCase


FALLBACK_URL = 'https://example.com/fallback.png'
IMAGE_URL = 'https://example.com/uploads/old-avatar.jpg'
HASH = hashlib.sha256(b'salt' + IMAGE_URL.encode('utf-8')).hexdigest()


class LegacyURLLookup:
    def get_legacy_url(self, hash_value):
        if hash_value == HASH:
            return IMAGE_URL

        return None


@override_settings(AVATAR_CACHE_LOCAL_HOSTS=['example.com'],
                   AVATAR_CACHE_ALLOW_REMOTE=False)
class LegacyIconHandlerTests(kgb.SpyAgency, TestCase):
    """Unit tests for avatarcache.handlers.legacy.LegacyIconHandler."""

    def setUp(self):
        super().setUp()

        self.session = requests.Session()
        self.handler = LegacyIconHandler(
            remote_images=RemoteImageService(session=self.session),
            cache=self.create_cache(),
            identities=LegacyURLLookup())

        self.spy_on(self.session.get,
                    op=kgb.SpyOpReturn(self.create_response(
                        self.create_image_data(size=(120, 90),
                                               image_format='JPEG'),
                        content_type='image/jpeg')))

    def test_get_url(self):
        """Testing LegacyIconHandler.get_url caches a resized copy"""
        url = self.handler.get_url(FALLBACK_URL, HASH, 48,
                                   {'url': IMAGE_URL})
        filename = 'legacy/%s/%s/%s-48.jpg' % (HASH[0], HASH[1], HASH)

        self.assertEqual(url, '/media/avatar-privacy/%s' % filename)

        image = Image.open(io.BytesIO(self.handler.cache.get(filename)))
        self.assertEqual(image.format, 'JPEG')
        self.assertEqual(image.size, (48, 48))

    def test_get_url_fetches_once(self):
        """Testing LegacyIconHandler.get_url only fetches an image once"""
        self.handler.get_url(FALLBACK_URL, HASH, 48, {'url': IMAGE_URL})
        self.handler.get_url(FALLBACK_URL, HASH, 48, {'url': IMAGE_URL})

        self.assertSpyCallCount(self.session.get, 1)

    def test_get_url_mimetype(self):
        """Testing LegacyIconHandler.get_url with an explicit MIME type"""
        url = self.handler.get_url(FALLBACK_URL, HASH, 48,
                                   {'url': IMAGE_URL,
                                    'mimetype': 'image/png'})

        self.assertTrue(url.endswith('/%s-48.png' % HASH))

    def test_get_url_fallback_as_source(self):
        """Testing LegacyIconHandler.get_url uses the fallback URL as the
        source
        """
        url = self.handler.get_url(FALLBACK_URL, HASH, 48, {})

        self.assertTrue(url.endswith('/%s-48.png' % HASH))
        self.assertSpyCalledWith(self.session.get, FALLBACK_URL)

    def test_get_url_invalid_url(self):
        """Testing LegacyIconHandler.get_url with a URL on another host"""
        url = self.handler.get_url(
            FALLBACK_URL, HASH, 48,
            {'url': 'https://images.example.net/avatar.png'})

        self.assertEqual(url, FALLBACK_URL)
        self.assertSpyNotCalled(self.session.get)

    def test_get_url_fetch_failed(self):
        """Testing LegacyIconHandler.get_url when the image can't be
        fetched
        """
        self.session.get.unspy()
        self.spy_on(self.session.get,
                    op=kgb.SpyOpRaise(requests.Timeout('slow')))

        self.assertEqual(
            self.handler.get_url(FALLBACK_URL, HASH, 48, {'url': IMAGE_URL}),
            FALLBACK_URL)

    def test_get_target_mimetype(self):
        """Testing LegacyIconHandler.get_target_mimetype"""
        handler = self.handler

        self.assertEqual(handler.get_target_mimetype(IMAGE_URL),
                         'image/jpeg')
        self.assertEqual(
            handler.get_target_mimetype('https://example.com/a.gif?x=1'),
            'image/gif')
        self.assertEqual(
            handler.get_target_mimetype('https://example.com/avatar'),
            'image/png')

    def test_cache_image(self):
        """Testing LegacyIconHandler.cache_image"""
        self.assertTrue(self.handler.cache_image(
            'legacy', HASH, 32, '%s/%s' % (HASH[0], HASH[1]), 'png'))
        self.assertTrue(self.handler.cache.exists(
            'legacy/%s/%s/%s-32.png' % (HASH[0], HASH[1], HASH)))

    def test_cache_image_unknown_hash(self):
        """Testing LegacyIconHandler.cache_image with an unknown hash"""
        self.assertFalse(self.handler.cache_image('legacy', 'f' * 64, 32,
                                                  'f/f', 'png'))
