"""Provides an app factory for the account directory service."""

import logging
from http import HTTPStatus
from typing import Any, Mapping, Optional

from flask import Flask, Response
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound

from . import routes
from .app_logging import setup_logger
from .directory import AccountDirectory
from .exceptions import StorageError
from .settings import Settings
from .store import RecordStore

logger = logging.getLogger(__name__)


def _route_not_found(error: Exception) -> Response:
    return routes.envelope(HTTPStatus.NOT_FOUND, 'ERR_ROUTE_NOT_FOUND',
                           'Route not found')


def _storage_failed(error: StorageError) -> Response:
    logger.error('Storage failure: %s', error)
    return routes.envelope(HTTPStatus.INTERNAL_SERVER_ERROR, 'ERR_STORAGE',
                           'Storage backend failed')


def _server_error(error: Exception) -> Any:
    if isinstance(error, HTTPException):
        return error
    logger.exception('Unhandled error: %s', error)
    return routes.envelope(HTTPStatus.INTERNAL_SERVER_ERROR, 'ERR_SERVER',
                           'Internal server error')


def _request_failed(error: routes.RequestFailed) -> Response:
    return routes.envelope(error.status_code, error.status, error.message)


def create_app(overrides: Optional[Mapping[str, Any]] = None,
               store: Optional[RecordStore] = None) -> Flask:
    """
    Initialize an instance of the account directory service.

    Parameters
    ----------
    overrides : mapping
        Config values that take precedence over :mod:`accountdir.config`.
    store : :class:`.RecordStore`
        Use this store instead of the one named by ``STORE_BACKEND``.

    """
    app = Flask('accountdir')
    app.config.from_pyfile('config.py')
    if overrides:
        app.config.update(overrides)

    settings = Settings.from_mapping(app.config)
    setup_logger(settings.log_level, settings.log_json)
    app.extensions['accountdir.settings'] = settings
    app.extensions['accountdir'] = \
        AccountDirectory.from_settings(settings, store=store)

    app.register_blueprint(routes.blueprint)
    app.errorhandler(NotFound)(_route_not_found)
    app.errorhandler(MethodNotAllowed)(_route_not_found)
    app.errorhandler(routes.RequestFailed)(_request_failed)
    app.errorhandler(StorageError)(_storage_failed)
    app.errorhandler(Exception)(_server_error)
    return app
