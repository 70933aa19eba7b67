"""Flask configuration for the account directory service."""

import os

STORE_BACKEND = os.environ.get('STORE_BACKEND', 's3')
"""Record store backend: ``s3``, ``redis``, or ``memory``."""

S3_BUCKET = os.environ.get('S3_BUCKET', 'click.accountdata')
S3_REGION = os.environ.get('S3_REGION', 'us-east-1')
S3_ENDPOINT_URL = os.environ.get('S3_ENDPOINT_URL')
"""Override for S3-compatible stores; ``None`` uses AWS."""

REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = os.environ.get('REDIS_PORT', '6379')
REDIS_DATABASE = os.environ.get('REDIS_DATABASE', '0')

LIST_PAGE_SIZE = os.environ.get('LIST_PAGE_SIZE', '1000')
"""Keys requested per listing call."""

MAX_WORKERS = os.environ.get('MAX_WORKERS', '4')
"""Upper bound on concurrent store calls within one operation."""

JWT_SECRET = os.environ.get('JWT_SECRET', 'foosecret')
JWT_EXPIRY = os.environ.get('JWT_EXPIRY', str(7 * 24 * 60 * 60))
"""Lifetime of login tokens, in seconds."""

BCRYPT_ROUNDS = os.environ.get('BCRYPT_ROUNDS', '10')

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
LOG_JSON = os.environ.get('LOG_JSON', '1')
