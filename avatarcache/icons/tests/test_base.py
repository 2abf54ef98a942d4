"""Unit tests for avatarcache.icons.generators.base."""

from __future__ import annotations

import random

from avatarcache.icons.generators.base import NumberGenerator, parse_hash
from avatarcache.testing.testcases import TestCase


class NumberGeneratorTests(TestCase):
    """Unit tests for avatarcache.icons.generators.base.NumberGenerator."""

    def test_same_hash_same_sequence(self):
        """Testing NumberGenerator yields the same sequence for a hash"""
        rng1 = NumberGenerator('abc12345ffff')
        rng2 = NumberGenerator('abc12345ffff')

        self.assertEqual([rng1.get(0, 1000) for i in range(10)],
                         [rng2.get(0, 1000) for i in range(10)])

    def test_seeded_from_first_digits(self):
        """Testing NumberGenerator only uses the first 8 hex digits"""
        rng1 = NumberGenerator('abc12345' + '0' * 56)
        rng2 = NumberGenerator('abc12345' + 'f' * 56)

        self.assertEqual(rng1.get_real(), rng2.get_real())

    def test_global_random_untouched(self):
        """Testing NumberGenerator doesn't affect the global random state"""
        random.seed(42)
        expected = random.random()

        random.seed(42)
        NumberGenerator('abc12345').get(0, 100)

        self.assertEqual(random.random(), expected)

    def test_get_bounds(self):
        """Testing NumberGenerator.get stays within inclusive bounds"""
        rng = NumberGenerator('0badf00d')
        values = {rng.get(3, 5) for i in range(200)}

        self.assertEqual(values, {3, 4, 5})

    def test_choice(self):
        """Testing NumberGenerator.choice"""
        rng = NumberGenerator('0badf00d')

        self.assertIn(rng.choice(['a', 'b', 'c']), ['a', 'b', 'c'])


class ParseHashTests(TestCase):
    """Unit tests for avatarcache.icons.generators.base.parse_hash."""

    def test_parse_hash(self):
        """Testing parse_hash"""
        self.assertEqual(parse_hash('0a1f', 1), 10)
        self.assertEqual(parse_hash('0a1f', 2, 2), 31)

    def test_negative_offset(self):
        """Testing parse_hash with a negative offset"""
        self.assertEqual(parse_hash('0a1f', -1), 15)
        self.assertEqual(parse_hash('0a1f', -3, 2), 161)

    def test_out_of_range(self):
        """Testing parse_hash past the end of the hash"""
        with self.assertRaises(ValueError):
            parse_hash('0a', 4)
