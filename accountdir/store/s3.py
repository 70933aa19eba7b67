"""Record store backed by an S3 bucket."""

import logging
from typing import Iterable, List, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from . import NotFound, Page, RecordStore, StorageError

logger = logging.getLogger(__name__)

MAX_DELETE_BATCH = 1000
"""Upper bound on keys per ``DeleteObjects`` request."""

_MISSING_CODES = {'NoSuchKey', '404', 'NotFound'}


class S3RecordStore(RecordStore):
    """
    Stores each record as a JSON object in a single bucket.

    The boto3 client is thread safe, so one instance may be shared by the
    fan-out workers of a request.
    """

    def __init__(self, bucket: str, region: str = 'us-east-1',
                 endpoint_url: Optional[str] = None,
                 page_size: int = 1000, client: Optional[object] = None) \
            -> None:
        """Set up the S3 client."""
        self.bucket = bucket
        self.page_size = min(page_size, 1000)
        if client is None:
            logger.debug('New S3 client for bucket %s in %s', bucket, region)
            client = boto3.client(
                's3',
                region_name=region,
                endpoint_url=endpoint_url,
                config=BotoConfig(retries={'max_attempts': 5,
                                           'mode': 'standard'})
            )
        self._s3 = client

    def get(self, key: str) -> bytes:
        try:
            resp = self._s3.get_object(Bucket=self.bucket, Key=key)
            data: bytes = resp['Body'].read()
        except ClientError as e:
            if e.response.get('Error', {}).get('Code', '') in _MISSING_CODES:
                raise NotFound(key) from e
            raise StorageError(f'Failed to get {key}: {e}') from e
        except BotoCoreError as e:
            raise StorageError(f'Failed to get {key}: {e}') from e
        return data

    def put(self, key: str, data: bytes) -> None:
        try:
            self._s3.put_object(Bucket=self.bucket, Key=key, Body=data,
                                ContentType='application/json')
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f'Failed to put {key}: {e}') from e

    def list_keys(self, prefix: str, token: Optional[str] = None) -> Page:
        params = {'Bucket': self.bucket, 'Prefix': prefix,
                  'MaxKeys': self.page_size}
        if token is not None:
            params['ContinuationToken'] = token
        try:
            resp = self._s3.list_objects_v2(**params)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f'Failed to list {prefix}: {e}') from e
        keys = [obj['Key'] for obj in resp.get('Contents', [])]
        if resp.get('IsTruncated'):
            return Page(keys, resp['NextContinuationToken'])
        return Page(keys, None)

    def delete_batch(self, keys: Iterable[str]) -> None:
        batch: List[str] = []
        for key in keys:
            batch.append(key)
            if len(batch) == MAX_DELETE_BATCH:
                self._delete_objects(batch)
                batch = []
        if batch:
            self._delete_objects(batch)

    def _delete_objects(self, keys: List[str]) -> None:
        try:
            resp = self._s3.delete_objects(
                Bucket=self.bucket,
                Delete={'Objects': [{'Key': key} for key in keys],
                        'Quiet': True}
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f'Failed to delete {len(keys)} keys: {e}') \
                from e
        errors = resp.get('Errors', [])
        if errors:
            for error in errors:
                logger.error('Could not delete %s: %s', error.get('Key'),
                             error.get('Message'))
            raise StorageError(f'Failed to delete {len(errors)} keys')
