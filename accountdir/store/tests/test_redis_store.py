"""Tests for :mod:`accountdir.store.redis_store`."""

from unittest import TestCase, mock

from redis.exceptions import ConnectionError

from accountdir.exceptions import NotFound, StorageError
from accountdir.store import redis_store


class TestRedisRecordStore(TestCase):
    """The Redis store uses SCAN cursors as continuation tokens."""

    @mock.patch(f'{redis_store.__name__}.redis.StrictRedis')
    def setUp(self, mock_strict_redis):
        """Use a mock Redis connection."""
        self.r = mock.MagicMock()
        mock_strict_redis.return_value = self.r
        self.store = redis_store.RedisRecordStore('localhost', 6379, 0,
                                                  page_size=2)

    def test_get(self):
        """A stored value is returned as is."""
        self.r.get.return_value = b'{}'
        self.assertEqual(self.store.get('users/1/account.json'), b'{}')

    def test_get_missing(self):
        """A ``None`` reply means the key is absent."""
        self.r.get.return_value = None
        with self.assertRaises(NotFound):
            self.store.get('users/1/account.json')

    def test_connection_failed(self):
        """Connection errors become :class:`StorageError`."""
        self.r.set.side_effect = ConnectionError
        with self.assertRaises(StorageError):
            self.store.put('users/1/account.json', b'{}')

    def test_scan(self):
        """Listing follows the cursor until Redis returns 0."""
        self.r.scan.side_effect = [
            (17, [b'users/a', b'users/b']),
            (0, [b'users/c']),
        ]
        self.assertEqual(list(self.store.iter_keys('users/')),
                         ['users/a', 'users/b', 'users/c'])
        first, second = self.r.scan.call_args_list
        self.assertEqual(first[1]['cursor'], 0)
        self.assertEqual(first[1]['match'], 'users/*')
        self.assertEqual(second[1]['cursor'], 17)

    def test_scan_escapes_prefix(self):
        """Glob characters in the prefix are matched literally."""
        self.r.scan.return_value = (0, [])
        self.store.list_keys('users/by-username/a*b')
        self.assertEqual(self.r.scan.call_args[1]['match'],
                         'users/by-username/a\\*b*')

    def test_delete_batch(self):
        """All keys are deleted in one command."""
        self.store.delete_batch(['a', 'b'])
        self.r.delete.assert_called_once_with('a', 'b')

    def test_delete_nothing(self):
        """No command is sent for an empty batch."""
        self.store.delete_batch([])
        self.r.delete.assert_not_called()
