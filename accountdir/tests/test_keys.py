"""Tests for :mod:`accountdir.keys`."""

from unittest import TestCase

from accountdir import keys


class TestIndexKeys(TestCase):
    """Index keys are built from case-folded values."""

    def test_username_key(self):
        """Usernames are lowercased."""
        self.assertEqual(keys.index_key('username', 'Alice'),
                         'users/by-username/alice.json')

    def test_email_key(self):
        """Email addresses are lowercased."""
        self.assertEqual(keys.index_key('email', 'A@X.com'),
                         'users/by-email/a@x.com.json')

    def test_unknown_field(self):
        """Only username and email are indexed."""
        with self.assertRaises(ValueError):
            keys.index_key('birthday', '2000-01-01')


class TestParseAccountKey(TestCase):
    """Only primary account keys yield an account ID."""

    def test_account_key(self):
        """The ID is the path segment after ``users/``."""
        self.assertEqual(keys.parse_account_key(keys.account_key('abc-123')),
                         'abc-123')

    def test_other_keys(self):
        """Config records, index entries and strays are ignored."""
        for key in ['users/abc/config.json',
                    'users/by-username/alice.json',
                    'users/by-username/account.json',
                    'users/by-email/account.json',
                    'users/abc/nested/account.json',
                    'users//account.json',
                    'other/abc/account.json']:
            self.assertIsNone(keys.parse_account_key(key), key)
