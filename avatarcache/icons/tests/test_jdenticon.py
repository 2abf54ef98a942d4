"""Unit tests for avatarcache.icons.generators.jdenticon."""

from __future__ import annotations

import hashlib

from avatarcache.errors import GenerationFailedError
from avatarcache.icons.generators.jdenticon import JdenticonGenerator
from avatarcache.testing.testcases import TestCase


HASH = hashlib.sha256(b'identicon@example.com').hexdigest()


class JdenticonGeneratorTests(TestCase):
    """Unit tests for avatarcache.icons.generators.jdenticon."""

    def setUp(self):
        super().setUp()

        self.generator = JdenticonGenerator()

    def test_build(self):
        """Testing JdenticonGenerator.build returns an SVG document"""
        data = self.generator.build(HASH, 64)

        self.assertTrue(data.startswith(b'<svg'))
        self.assertTrue(data.endswith(b'</svg>'))
        self.assertIn(b'width="64"', data)
        self.assertIn(b'<path', data)

    def test_build_deterministic(self):
        """Testing JdenticonGenerator.build is deterministic"""
        self.assertEqual(self.generator.build(HASH, 64),
                         JdenticonGenerator().build(HASH, 64))

    def test_build_different_hashes(self):
        """Testing JdenticonGenerator.build varies with the hash"""
        other = hashlib.sha256(b'other@example.com').hexdigest()

        self.assertNotEqual(self.generator.build(HASH, 64),
                            self.generator.build(other, 64))

    def test_build_at_most_three_colors(self):
        """Testing JdenticonGenerator.build uses one path per color"""
        data = self.generator.build(HASH, 128).decode('utf-8')

        self.assertLessEqual(data.count('<path'), 3)
        self.assertGreaterEqual(data.count('<path'), 1)

    def test_build_short_hash(self):
        """Testing JdenticonGenerator.build with a hash that's too short"""
        with self.assertRaises(GenerationFailedError):
            self.generator.build('abc', 64)

    def test_build_matches_other_process(self):
        """Testing JdenticonGenerator.build gives the same icon in another process"""
        self.assertEqual(
            self.build_icon_in_subprocess(JdenticonGenerator, HASH, 64),
            hashlib.sha256(self.generator.build(HASH, 64)).hexdigest())
