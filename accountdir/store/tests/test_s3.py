"""Tests for :mod:`accountdir.store.s3`."""

import io
from unittest import TestCase, mock

from botocore.exceptions import ClientError, EndpointConnectionError

from accountdir.exceptions import NotFound, StorageError
from accountdir.store import s3


def _client_error(code: str) -> ClientError:
    return ClientError({'Error': {'Code': code, 'Message': code}}, 'op')


class TestS3RecordStore(TestCase):
    """The S3 store translates botocore errors into store errors."""

    def setUp(self):
        """Use a mock S3 client."""
        self.client = mock.MagicMock()
        self.store = s3.S3RecordStore('click.accountdata', page_size=2,
                                      client=self.client)

    @mock.patch(f'{s3.__name__}.boto3')
    def test_client_created(self, mock_boto3):
        """A client is created for the configured region and endpoint."""
        s3.S3RecordStore('bucket', region='eu-west-1',
                         endpoint_url='http://localhost:9000')
        args, kwargs = mock_boto3.client.call_args
        self.assertEqual(args, ('s3',))
        self.assertEqual(kwargs['region_name'], 'eu-west-1')
        self.assertEqual(kwargs['endpoint_url'], 'http://localhost:9000')

    def test_get(self):
        """The object body is returned as bytes."""
        self.client.get_object.return_value = {'Body': io.BytesIO(b'{}')}
        self.assertEqual(self.store.get('users/1/account.json'), b'{}')
        self.client.get_object.assert_called_once_with(
            Bucket='click.accountdata', Key='users/1/account.json'
        )

    def test_get_missing(self):
        """``NoSuchKey`` becomes :class:`NotFound`."""
        self.client.get_object.side_effect = _client_error('NoSuchKey')
        with self.assertRaises(NotFound):
            self.store.get('users/1/account.json')

    def test_get_denied(self):
        """Any other client error becomes :class:`StorageError`."""
        self.client.get_object.side_effect = _client_error('AccessDenied')
        with self.assertRaises(StorageError):
            self.store.get('users/1/account.json')

    def test_get_unreachable(self):
        """Connection failures become :class:`StorageError`."""
        self.client.get_object.side_effect = \
            EndpointConnectionError(endpoint_url='http://nowhere')
        with self.assertRaises(StorageError):
            self.store.get('users/1/account.json')

    def test_put(self):
        """Records are written as JSON objects."""
        self.store.put('users/1/config.json', b'{}')
        _, kwargs = self.client.put_object.call_args
        self.assertEqual(kwargs['Key'], 'users/1/config.json')
        self.assertEqual(kwargs['Body'], b'{}')
        self.assertEqual(kwargs['ContentType'], 'application/json')

    def test_put_fails(self):
        """A failed write raises :class:`StorageError`."""
        self.client.put_object.side_effect = _client_error('SlowDown')
        with self.assertRaises(StorageError):
            self.store.put('users/1/config.json', b'{}')

    def test_list_pages(self):
        """The continuation token is passed back until the listing ends."""
        self.client.list_objects_v2.side_effect = [
            {'Contents': [{'Key': 'users/a'}, {'Key': 'users/b'}],
             'IsTruncated': True, 'NextContinuationToken': 'tok1'},
            {'Contents': [{'Key': 'users/c'}], 'IsTruncated': False},
        ]
        self.assertEqual(list(self.store.iter_keys('users/')),
                         ['users/a', 'users/b', 'users/c'])
        first, second = self.client.list_objects_v2.call_args_list
        self.assertNotIn('ContinuationToken', first[1])
        self.assertEqual(second[1]['ContinuationToken'], 'tok1')
        self.assertEqual(second[1]['MaxKeys'], 2)

    def test_list_empty(self):
        """An empty listing has no ``Contents`` at all."""
        self.client.list_objects_v2.return_value = {'IsTruncated': False}
        self.assertEqual(list(self.store.iter_keys('users/')), [])

    def test_delete_batch_chunks(self):
        """Deletes are sent at most 1000 keys at a time."""
        self.client.delete_objects.return_value = {}
        self.store.delete_batch(f'users/by-email/{i}.json'
                                for i in range(2500))
        sizes = [len(call[1]['Delete']['Objects'])
                 for call in self.client.delete_objects.call_args_list]
        self.assertEqual(sizes, [1000, 1000, 500])

    def test_delete_batch_partial_failure(self):
        """Per-key errors reported by S3 raise :class:`StorageError`."""
        self.client.delete_objects.return_value = {
            'Errors': [{'Key': 'users/by-email/a.json',
                        'Message': 'Access Denied'}]
        }
        with self.assertRaises(StorageError):
            self.store.delete_batch(['users/by-email/a.json'])
