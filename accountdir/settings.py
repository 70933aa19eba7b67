"""Immutable process-wide settings, built once at startup."""

from datetime import timedelta
from typing import Any, Mapping, NamedTuple, Optional

from . import config as defaults


class Settings(NamedTuple):
    """Settings passed explicitly to the directory and request layer."""

    store_backend: str
    s3_bucket: str
    s3_region: str
    s3_endpoint_url: Optional[str]
    redis_host: str
    redis_port: int
    redis_database: int
    list_page_size: int
    max_workers: int
    jwt_secret: str
    jwt_expiry: timedelta
    bcrypt_rounds: int
    log_level: str
    log_json: bool

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> 'Settings':
        """
        Build settings from a Flask config or similar mapping.

        Keys that are absent fall back to :mod:`accountdir.config`. Values
        may be strings, as they are when read from the environment.
        """
        def get(name: str) -> Any:
            return config.get(name, getattr(defaults, name))

        return cls(
            store_backend=str(get('STORE_BACKEND')),
            s3_bucket=str(get('S3_BUCKET')),
            s3_region=str(get('S3_REGION')),
            s3_endpoint_url=get('S3_ENDPOINT_URL') or None,
            redis_host=str(get('REDIS_HOST')),
            redis_port=int(get('REDIS_PORT')),
            redis_database=int(get('REDIS_DATABASE')),
            list_page_size=int(get('LIST_PAGE_SIZE')),
            max_workers=int(get('MAX_WORKERS')),
            jwt_secret=str(get('JWT_SECRET')),
            jwt_expiry=timedelta(seconds=int(get('JWT_EXPIRY'))),
            bcrypt_rounds=int(get('BCRYPT_ROUNDS')),
            log_level=str(get('LOG_LEVEL')).upper(),
            log_json=str(get('LOG_JSON')) in ('1', 'True', 'true'),
        )
