"""Unit tests for avatarcache.locks."""

from __future__ import annotations

import threading
import time

from avatarcache.locks import KeyedLock
from avatarcache.testing.testcases import TestCase


class KeyedLockTests(TestCase):
    """Unit tests for avatarcache.locks.KeyedLock."""

    def test_hold_releases_key(self):
        """Testing KeyedLock.hold forgets keys once released"""
        locks = KeyedLock()

        with locks.hold('a'):
            self.assertEqual(len(locks), 1)

        self.assertEqual(len(locks), 0)

    def test_hold_releases_on_error(self):
        """Testing KeyedLock.hold releases the key when an error is raised"""
        locks = KeyedLock()

        with self.assertRaises(ValueError):
            with locks.hold('a'):
                raise ValueError

        self.assertEqual(len(locks), 0)

    def test_hold_different_keys(self):
        """Testing KeyedLock.hold doesn't block on other keys"""
        locks = KeyedLock()

        with locks.hold('a'):
            with locks.hold('b'):
                self.assertEqual(len(locks), 2)

    def test_hold_serializes_same_key(self):
        """Testing KeyedLock.hold serializes work on the same key"""
        locks = KeyedLock()
        active = []
        overlaps = []

        def _work():
            with locks.hold(('monsterid', 'abc', 80)):
                active.append(1)

                if len(active) > 1:
                    overlaps.append(1)

                time.sleep(0.01)
                active.pop()

        threads = [threading.Thread(target=_work) for i in range(5)]

        for thread in threads:
            thread.start()

        for thread in threads:
            thread.join()

        self.assertEqual(overlaps, [])
        self.assertEqual(len(locks), 0)
