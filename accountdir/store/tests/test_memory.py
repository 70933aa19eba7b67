"""Tests for :mod:`accountdir.store.memory`."""

from unittest import TestCase

from accountdir.exceptions import NotFound
from accountdir.store.memory import InMemoryRecordStore


class TestGetPut(TestCase):
    """Records are opaque bytes stored by key."""

    def setUp(self):
        """Start with an empty store."""
        self.store = InMemoryRecordStore()

    def test_get_missing(self):
        """Getting an absent key raises :class:`NotFound`."""
        with self.assertRaises(NotFound) as ctx:
            self.store.get('users/nope/account.json')
        self.assertEqual(ctx.exception.key, 'users/nope/account.json')

    def test_put_then_get(self):
        """A put record can be read back, and replaced."""
        self.store.put('a', b'one')
        self.store.put('a', b'two')
        self.assertEqual(self.store.get('a'), b'two')
        self.assertEqual(len(self.store), 1)

    def test_delete_batch(self):
        """Deleting ignores keys that are already absent."""
        self.store.put('a', b'1')
        self.store.put('b', b'2')
        self.store.delete_batch(['a', 'zzz'])
        self.assertNotIn('a', self.store)
        self.assertIn('b', self.store)


class TestListing(TestCase):
    """Listing is paginated with continuation tokens."""

    def setUp(self):
        """Five keys under one prefix, a few elsewhere."""
        self.store = InMemoryRecordStore(page_size=2)
        self.keys = [f'users/{i}/account.json' for i in range(5)]
        for key in self.keys:
            self.store.put(key, b'{}')
        self.store.put('other/0', b'{}')
        self.store.put('user', b'{}')

    def test_pages(self):
        """Pages respect the page size, and the last has no token."""
        page = self.store.list_keys('users/')
        self.assertEqual(page.keys, self.keys[:2])
        self.assertIsNotNone(page.next_token)
        page = self.store.list_keys('users/', page.next_token)
        self.assertEqual(page.keys, self.keys[2:4])
        page = self.store.list_keys('users/', page.next_token)
        self.assertEqual(page.keys, self.keys[4:])
        self.assertIsNone(page.next_token)

    def test_iter_keys(self):
        """Every key under the prefix is generated exactly once."""
        self.assertEqual(list(self.store.iter_keys('users/')), self.keys)

    def test_iter_keys_is_restartable(self):
        """Each call starts a fresh listing."""
        first = list(self.store.iter_keys('users/'))
        second = list(self.store.iter_keys('users/'))
        self.assertEqual(first, second)

    def test_empty_prefix_listing(self):
        """A prefix with no keys gives one empty page."""
        self.assertEqual(list(self.store.pages('nothing/')), [[]])

    def test_delete_while_listing(self):
        """Deleting each page as it is listed still visits every key."""
        seen = []
        for page in self.store.pages('users/'):
            seen.extend(page)
            self.store.delete_batch(page)
        self.assertEqual(seen, self.keys)
        self.assertEqual(list(self.store.iter_keys('users/')), [])
