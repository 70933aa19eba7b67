"""Tests for :mod:`accountdir.domain`."""

from datetime import date
from unittest import TestCase

from accountdir import domain
from accountdir.exceptions import MalformedRecord


class TestAccount(TestCase):
    """Accounts are stored as JSON objects."""

    def test_from_record(self):
        """A stored record is decoded into an :class:`.Account`."""
        account = domain.Account.from_record('id-1', 'key', {
            'username': 'alice', 'email': 'a@x.com',
            'passwordHash': '$2b$04$hash', 'birthday': '1990-01-02'
        })
        self.assertEqual(account.account_id, 'id-1')
        self.assertEqual(account.birthday, date(1990, 1, 2))
        self.assertEqual(account.to_record()['birthday'], '1990-01-02')

    def test_legacy_password_field(self):
        """Older records keep the hash under ``password``."""
        account = domain.Account.from_record('id-1', 'key', {
            'username': 'alice', 'email': 'a@x.com',
            'password': '$2b$04$hash', 'birthday': '1990-01-02'
        })
        self.assertEqual(account.password_hash, '$2b$04$hash')

    def test_missing_fields(self):
        """Records without the required fields are malformed."""
        for data in [{}, [], {'username': 'alice'},
                     {'username': 'alice', 'email': 'a@x.com',
                      'passwordHash': 'h', 'birthday': 'not a date'},
                     {'username': 7, 'email': 'a@x.com',
                      'passwordHash': 'h', 'birthday': '1990-01-02'}]:
            with self.assertRaises(MalformedRecord):
                domain.Account.from_record('id-1', 'key', data)

    def test_public_view(self):
        """The public view leaves out the password hash."""
        account = domain.Account('id-1', 'alice', 'a@x.com', 'h',
                                 date(1990, 1, 2))
        self.assertNotIn('passwordHash', account.to_public())


class TestDecode(TestCase):
    """Stored bytes are UTF-8 JSON."""

    def test_bad_json(self):
        """Invalid JSON is malformed."""
        with self.assertRaises(MalformedRecord):
            domain.decode('key', b'{nope')

    def test_bad_encoding(self):
        """Bytes that are not UTF-8 are malformed."""
        with self.assertRaises(MalformedRecord):
            domain.decode('key', b'\xff\xfe')
