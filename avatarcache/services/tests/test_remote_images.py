"""Unit tests for avatarcache.services.remote_images."""

from __future__ import annotations

import io

import kgb
import requests
from django.test import override_settings
from PIL import Image

from avatarcache.errors import FetchFailedError, InvalidSourceURLError
from avatarcache.services.remote_images import RemoteImageService
from avatarcache.testing.testcases import TestCase


@override_settings(AVATAR_CACHE_LOCAL_HOSTS=['example.com'],
                   AVATAR_CACHE_ALLOW_REMOTE=False)
class RemoteImageServiceTests(kgb.SpyAgency, TestCase):
    """Unit tests for avatarcache.services.remote_images."""

    def setUp(self):
        super().setUp()

        self.session = requests.Session()
        self.service = RemoteImageService(session=self.session)

    def test_validate_image_url_local(self):
        """Testing RemoteImageService.validate_image_url with a local URL"""
        self.assertTrue(self.service.validate_image_url(
            'https://example.com/images/avatar.png', 'legacy'))

    def test_validate_image_url_remote(self):
        """Testing RemoteImageService.validate_image_url with a URL on
        another host
        """
        self.assertFalse(self.service.validate_image_url(
            'https://images.example.net/avatar.png', 'legacy'))

    def test_validate_image_url_remote_allowed(self):
        """Testing RemoteImageService.validate_image_url with a URL on
        another host and remote URLs allowed
        """
        self.assertTrue(self.service.validate_image_url(
            'https://images.example.net/avatar.png', 'legacy',
            allow_remote=True))

    @override_settings(AVATAR_CACHE_ALLOW_REMOTE=True)
    def test_validate_image_url_remote_allowed_setting(self):
        """Testing RemoteImageService.validate_image_url with
        AVATAR_CACHE_ALLOW_REMOTE
        """
        self.assertTrue(self.service.validate_image_url(
            'https://images.example.net/avatar.png'))

    def test_validate_image_url_no_path(self):
        """Testing RemoteImageService.validate_image_url without a path"""
        self.assertFalse(self.service.validate_image_url(
            'https://example.com/'))

    def test_validate_image_url_invalid(self):
        """Testing RemoteImageService.validate_image_url with invalid URLs"""
        for url in ('', 'mystery', 'ftp://example.com/avatar.png',
                    '/images/avatar.png'):
            self.assertFalse(self.service.validate_image_url(url))

    def test_check_image_url(self):
        """Testing RemoteImageService.check_image_url raises for rejected
        URLs
        """
        with self.assertRaises(InvalidSourceURLError):
            self.service.check_image_url('https://images.example.net/a.png',
                                         'default')

    def test_get_image(self):
        """Testing RemoteImageService.get_image resizes the image"""
        self.spy_on(self.session.get,
                    op=kgb.SpyOpReturn(self.create_response(
                        self.create_image_data(size=(50, 40)))))

        data = self.service.get_image('https://example.com/avatar.png', 32)
        image = Image.open(io.BytesIO(data))

        self.assertEqual(image.size, (32, 32))
        self.assertEqual(image.format, 'PNG')

    def test_get_image_jpeg(self):
        """Testing RemoteImageService.get_image with a JPEG result"""
        self.spy_on(self.session.get,
                    op=kgb.SpyOpReturn(self.create_response(
                        self.create_image_data())))

        data = self.service.get_image('https://example.com/avatar.jpg', 16,
                                      'image/jpeg')

        self.assertEqual(Image.open(io.BytesIO(data)).format, 'JPEG')

    def test_get_image_not_an_image(self):
        """Testing RemoteImageService.get_image with data that isn't an
        image
        """
        self.spy_on(self.session.get,
                    op=kgb.SpyOpReturn(self.create_response(
                        b'<html></html>', content_type='text/html')))

        self.assertEqual(
            self.service.get_image('https://example.com/avatar.png', 32),
            b'')

    def test_fetch_error(self):
        """Testing RemoteImageService.fetch with HTTP errors"""
        self.spy_on(self.session.get,
                    op=kgb.SpyOpReturn(self.create_response(
                        b'', status_code=500, content_type='text/plain')))

        with self.assertRaises(FetchFailedError):
            self.service.fetch('https://example.com/avatar.png')

    def test_fetch_too_large(self):
        """Testing RemoteImageService.fetch with an oversized response"""
        self.service.max_content_length = 10
        self.spy_on(self.session.get,
                    op=kgb.SpyOpReturn(self.create_response(b'x' * 11)))

        with self.assertRaises(FetchFailedError):
            self.service.fetch('https://example.com/avatar.png')

    def test_fetch_content_length_too_large(self):
        """Testing RemoteImageService.fetch rejects an oversized
        Content-Length without reading the body
        """
        self.service.max_content_length = 10
        response = self.create_response(b'x' * 5,
                                        headers={'Content-Length': '20'},
                                        stream=True)
        self.spy_on(self.session.get, op=kgb.SpyOpReturn(response))
        self.spy_on(response.iter_content)

        with self.assertRaises(FetchFailedError):
            self.service.fetch('https://example.com/avatar.png')

        self.assertSpyNotCalled(response.iter_content)
        self.assertTrue(response.raw.closed)

    def test_fetch_stops_reading_when_too_large(self):
        """Testing RemoteImageService.fetch stops reading a streamed body
        once it's over the limit
        """
        self.service.max_content_length = 10
        self.service.chunk_size = 4
        response = self.create_response(b'x' * 100, stream=True)
        self.spy_on(self.session.get, op=kgb.SpyOpReturn(response))

        with self.assertRaises(FetchFailedError):
            self.service.fetch('https://example.com/avatar.png')

        self.assertSpyCalledWith(self.session.get,
                                 'https://example.com/avatar.png',
                                 stream=True)
        self.assertTrue(response.raw.closed)

    def test_fetch_streamed(self):
        """Testing RemoteImageService.fetch with a streamed body"""
        self.service.chunk_size = 4
        self.spy_on(self.session.get,
                    op=kgb.SpyOpReturn(self.create_response(
                        b'0123456789', stream=True)))

        self.assertEqual(self.service.fetch('https://example.com/avatar.png'),
                         b'0123456789')
