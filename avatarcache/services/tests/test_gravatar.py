"""Unit tests for avatarcache.services.gravatar."""

from __future__ import annotations

from hashlib import md5

import kgb
import requests
from django.core.cache import cache
from django.test import override_settings

from avatarcache.errors import FetchFailedError, InvalidMimeTypeError
from avatarcache.services.gravatar import (DAY,
                                           HOUR,
                                           MINUTE,
                                           WEEK,
                                           GravatarService)
from avatarcache.testing.testcases import TestCase


EMAIL = 'User@Example.com '
EMAIL_HASH = md5(b'user@example.com').hexdigest()


class GravatarServiceTests(kgb.SpyAgency, TestCase):
    """Unit tests for avatarcache.services.gravatar.GravatarService."""

    def setUp(self):
        super().setUp()

        self.session = requests.Session()
        self.service = GravatarService(session=self.session)

    def test_get_hash(self):
        """Testing GravatarService.get_hash normalizes the address"""
        self.assertEqual(self.service.get_hash(EMAIL), EMAIL_HASH)

    def test_get_url(self):
        """Testing GravatarService.get_url"""
        self.assertEqual(
            self.service.get_url(EMAIL, 64, 'pg'),
            'https://secure.gravatar.com/avatar/%s?d=404&s=64&r=pg'
            % EMAIL_HASH)

    @override_settings(GRAVATAR_RATING='r')
    def test_get_url_default_rating(self):
        """Testing GravatarService.get_url with GRAVATAR_RATING"""
        self.assertEqual(
            self.service.get_url(EMAIL),
            'https://secure.gravatar.com/avatar/%s?d=404&s=80&r=r'
            % EMAIL_HASH)

    def test_fetch_image(self):
        """Testing GravatarService.fetch_image"""
        self.spy_on(self.session.get,
                    op=kgb.SpyOpReturn(self.create_response(b'png-data')))

        self.assertEqual(self.service.fetch_image(EMAIL, 64), b'png-data')
        self.assertSpyCalledWith(
            self.session.get,
            'https://secure.gravatar.com/avatar/%s?d=404&s=64&r=g'
            % EMAIL_HASH)

    def test_get_url_mimetype(self):
        """Testing GravatarService.get_url with an image type"""
        self.assertEqual(
            self.service.get_url(EMAIL, 64, 'g', mimetype='image/jpeg'),
            'https://secure.gravatar.com/avatar/%s.jpg?d=404&s=64&r=g'
            % EMAIL_HASH)

    def test_fetch_image_mimetype(self):
        """Testing GravatarService.fetch_image asks for the requested type"""
        self.spy_on(self.session.get,
                    op=kgb.SpyOpReturn(self.create_response(b'png-data')))

        self.assertEqual(
            self.service.fetch_image(EMAIL, 64, mimetype='image/png'),
            b'png-data')
        self.assertSpyCalledWith(
            self.session.get,
            'https://secure.gravatar.com/avatar/%s.png?d=404&s=64&r=g'
            % EMAIL_HASH)

    def test_fetch_image_html(self):
        """Testing GravatarService.fetch_image with an HTML response"""
        self.spy_on(self.session.get,
                    op=kgb.SpyOpReturn(self.create_response(
                        b'<html></html>', content_type='text/html')))

        with self.assertRaises(InvalidMimeTypeError) as ctx:
            self.service.fetch_image(EMAIL, 64)

        self.assertEqual(ctx.exception.mimetype, 'text/html')

    def test_fetch_image_unexpected_type(self):
        """Testing GravatarService.fetch_image with a different image type
        than requested
        """
        self.spy_on(self.session.get,
                    op=kgb.SpyOpReturn(self.create_response(b'png-data')))

        with self.assertRaises(InvalidMimeTypeError):
            self.service.fetch_image(EMAIL, 64, mimetype='image/jpeg')

    def test_fetch_image_not_found(self):
        """Testing GravatarService.fetch_image with HTTP 404"""
        self.spy_on(self.session.get,
                    op=kgb.SpyOpReturn(self.create_response(
                        b'', status_code=404, content_type='text/plain')))

        with self.assertRaises(FetchFailedError):
            self.service.fetch_image(EMAIL, 64)

    def test_fetch_image_connection_error(self):
        """Testing GravatarService.fetch_image with a connection error"""
        self.spy_on(self.session.get,
                    op=kgb.SpyOpRaise(requests.ConnectionError('down')))

        with self.assertRaises(FetchFailedError):
            self.service.fetch_image(EMAIL, 64)

    def test_get_image_failure(self):
        """Testing GravatarService.get_image returns empty data on failure"""
        self.spy_on(self.session.get,
                    op=kgb.SpyOpReturn(self.create_response(
                        b'<html></html>', content_type='text/html')))

        self.assertEqual(self.service.get_image(EMAIL, 64), b'')

    def test_validate_found(self):
        """Testing GravatarService.validate with an existing Gravatar"""
        self.spy_on(self.session.head,
                    op=kgb.SpyOpReturn(self.create_response(
                        content_type='image/jpeg')))
        self.spy_on(cache.set)

        self.assertEqual(self.service.validate(EMAIL), 'image/jpeg')
        self.assertSpyCalledWith(
            cache.set,
            'avatarcache-gravatar-check-%s' % EMAIL_HASH,
            'image/jpeg',
            timeout=WEEK)

    def test_validate_cached(self):
        """Testing GravatarService.validate uses the cached result"""
        self.spy_on(self.session.head,
                    op=kgb.SpyOpReturn(self.create_response(
                        content_type='image/png')))

        self.service.validate(EMAIL)
        self.service.validate(EMAIL)

        self.assertSpyCallCount(self.session.head, 1)

    def test_validate_not_found(self):
        """Testing GravatarService.validate without a Gravatar"""
        self.spy_on(self.session.head,
                    op=kgb.SpyOpReturn(self.create_response(
                        status_code=404, content_type='text/plain')))
        self.spy_on(cache.set)

        self.assertEqual(self.service.validate(EMAIL, age=2 * HOUR), '')
        self.assertSpyCalledWith(
            cache.set,
            'avatarcache-gravatar-check-%s' % EMAIL_HASH,
            '',
            timeout=HOUR)

    def test_validate_server_error(self):
        """Testing GravatarService.validate doesn't cache server errors"""
        self.spy_on(self.session.head,
                    op=kgb.SpyOpReturn(self.create_response(
                        status_code=500, content_type='text/plain')))
        self.spy_on(cache.set)

        self.assertEqual(self.service.validate(EMAIL), '')
        self.assertSpyNotCalled(cache.set)

    def test_validate_empty(self):
        """Testing GravatarService.validate without an e-mail address"""
        self.spy_on(self.session.head)

        self.assertEqual(self.service.validate(''), '')
        self.assertSpyNotCalled(self.session.head)

    def test_get_caching_duration(self):
        """Testing GravatarService.get_caching_duration"""
        service = self.service

        self.assertEqual(service.get_caching_duration(True, 0), WEEK)
        self.assertEqual(service.get_caching_duration(False, 0),
                         10 * MINUTE)
        self.assertEqual(service.get_caching_duration(False, 2 * HOUR),
                         HOUR)
        self.assertEqual(service.get_caching_duration(False, 2 * DAY), DAY)
        self.assertEqual(service.get_caching_duration(False, 2 * WEEK),
                         WEEK)
