"""Unit tests for avatarcache.handlers.dispatch."""

from __future__ import annotations

import hashlib

import kgb
from django.templatetags.static import static

from avatarcache.handlers.default_icons import DefaultIconsHandler
from avatarcache.handlers.dispatch import (AvatarHandlers,
                                           AvatarSource,
                                           CACHE_PATH_RE,
                                           cache_image_for_path,
                                           get_avatar_url)
from avatarcache.handlers.gravatar import GravatarHandler
from avatarcache.handlers.legacy import LegacyIconHandler
from avatarcache.handlers.user_avatar import UserAvatarHandler
from avatarcache.hashing import Hasher
from avatarcache.icons.registry import IconProviderRegistry
from avatarcache.testing.testcases import TestCase


FALLBACK_URL = 'https://example.com/fallback.png'
HASH = hashlib.sha256(b'salt' + b'someone@example.com').hexdigest()


class DispatchTests(kgb.SpyAgency, TestCase):
    """Unit tests for avatarcache.handlers.dispatch."""

    def setUp(self):
        super().setUp()

        self.handlers = AvatarHandlers(
            cache=self.create_cache(),
            registry=IconProviderRegistry(hasher=Hasher(lambda: 'salt')))

    def test_handlers_share_state(self):
        """Testing AvatarHandlers shares the cache and locks"""
        handlers = self.handlers

        for handler in (handlers.gravatar, handlers.legacy, handlers.user):
            self.assertIs(handler.cache, handlers.default_icons.cache)
            self.assertIs(handler.locks, handlers.default_icons.locks)

        self.assertIs(handlers.legacy.remote_images,
                      handlers.default_icons.remote_images)

    def test_get_handler(self):
        """Testing AvatarHandlers.get_handler"""
        handlers = self.handlers

        self.assertIsInstance(handlers.get_handler(AvatarSource.DEFAULT_ICON),
                              DefaultIconsHandler)
        self.assertIsInstance(handlers.get_handler(AvatarSource.GRAVATAR),
                              GravatarHandler)
        self.assertIsInstance(handlers.get_handler(AvatarSource.LEGACY),
                              LegacyIconHandler)
        self.assertIsInstance(handlers.get_handler(AvatarSource.USER),
                              UserAvatarHandler)

    def test_get_handler_for_type(self):
        """Testing AvatarHandlers.get_handler_for_type"""
        handlers = self.handlers

        self.assertIs(handlers.get_handler_for_type('gravatar'),
                      handlers.gravatar)
        self.assertIs(handlers.get_handler_for_type('legacy'),
                      handlers.legacy)
        self.assertIs(handlers.get_handler_for_type('user'), handlers.user)
        self.assertIs(handlers.get_handler_for_type('monsterid'),
                      handlers.default_icons)
        self.assertIs(handlers.get_handler_for_type('custom'),
                      handlers.default_icons)

    def test_get_avatar_url(self):
        """Testing get_avatar_url with a default icon"""
        self.assertEqual(
            get_avatar_url(self.handlers, AvatarSource.DEFAULT_ICON,
                           FALLBACK_URL, HASH, 64, {'default': 'mystery'}),
            static('avatarcache/images/mystery.svg'))

    def test_get_avatar_url_user(self):
        """Testing get_avatar_url with an uploaded avatar"""
        self.spy_on(self.handlers.user.get_url)

        get_avatar_url(self.handlers, AvatarSource.USER, FALLBACK_URL, HASH,
                       64, {})

        self.assertSpyCalledWith(self.handlers.user.get_url,
                                 FALLBACK_URL, HASH, 64, {})

    def test_cache_path_re(self):
        """Testing CACHE_PATH_RE"""
        m = CACHE_PATH_RE.match('custom/1/%s-64.png' % HASH)

        self.assertIsNotNone(m)
        self.assertEqual(m.group('type'), 'custom')
        self.assertEqual(m.group('subdir'), '1/')
        self.assertEqual(m.group('hash'), HASH)
        self.assertEqual(m.group('size'), '64')
        self.assertEqual(m.group('ext'), 'png')

    def test_cache_image_for_path(self):
        """Testing cache_image_for_path with a generated icon"""
        path = 'wavatar/%s/%s/%s-40.png' % (HASH[0], HASH[1], HASH)

        self.assertTrue(cache_image_for_path(self.handlers, path))
        self.assertTrue(self.handlers.cache.exists(path))

    def test_cache_image_for_path_dispatch(self):
        """Testing cache_image_for_path passes the parsed path to the
        handler
        """
        self.spy_on(self.handlers.gravatar.cache_image,
                    op=kgb.SpyOpReturn(True))

        self.assertTrue(cache_image_for_path(
            self.handlers,
            '/gravatar/%s/%s/%s-128.jpg' % (HASH[0], HASH[1], HASH)))
        self.assertSpyCalledWith(self.handlers.gravatar.cache_image,
                                 icon_type='gravatar',
                                 hash_value=HASH,
                                 size=128,
                                 subdir='%s/%s' % (HASH[0], HASH[1]),
                                 extension='jpg')

    def test_cache_image_for_path_invalid(self):
        """Testing cache_image_for_path with invalid paths"""
        for path in ('', 'monsterid', 'monsterid/a/b/not-hex-64.png',
                     '../etc/passwd', 'monsterid/a/b/abc-64'):
            self.assertFalse(cache_image_for_path(self.handlers, path))
