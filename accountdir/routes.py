"""
Request layer for the account directory.

Every route takes a JSON body via ``POST`` and answers with the envelope
``{"status": <code>, "message": <text>, ...payload}``.
"""

import logging
from http import HTTPStatus
from typing import Any, Dict, Optional

from flask import Blueprint, Response, current_app, jsonify, request

from . import passwords, sanitize, tokens
from .directory import AccountDirectory
from .exceptions import AuthenticationFailed, DuplicateConflict, \
    InvalidToken, MalformedRecord, NotFound
from .settings import Settings

logger = logging.getLogger(__name__)

blueprint = Blueprint('accountdir', __name__, url_prefix='')


class RequestFailed(Exception):
    """Aborts a request with an error envelope."""

    def __init__(self, status_code: int, status: str, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.status = status
        self.message = message


def envelope(status_code: int, status: str, message: str,
             **data: Any) -> Response:
    """Build a response in the standard envelope."""
    response = jsonify(dict(status=status, message=message, **data))
    response.status_code = int(status_code)
    return response


def _directory() -> AccountDirectory:
    return current_app.extensions['accountdir']     # type: ignore


def _settings() -> Settings:
    return current_app.extensions['accountdir.settings']    # type: ignore


def _body() -> Dict[str, Any]:
    if not request.get_data():
        return {}
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        logger.debug('Request body is not a JSON object')
        raise RequestFailed(HTTPStatus.BAD_REQUEST, 'ERR_INVALID_JSON',
                            'Invalid JSON body')
    return data


def _require(body: Dict[str, Any], *fields: str) -> None:
    missing = [f for f in fields if body.get(f) in (None, '')]
    if missing:
        logger.debug('Missing fields: %s', missing)
        raise RequestFailed(HTTPStatus.BAD_REQUEST, 'ERR_MISSING_FIELDS',
                            'Missing fields')


def _authorize(body: Dict[str, Any]) -> str:
    """Get the account ID from the token in the body or header."""
    token: Optional[str] = body.get('token')
    auth_header = request.headers.get('Authorization')
    if not token and auth_header:
        parts = auth_header.split()
        if len(parts) == 2 and parts[0].lower() == 'bearer':
            token = parts[1]
    if not token or not isinstance(token, str):
        raise RequestFailed(HTTPStatus.UNAUTHORIZED, 'ERR_NOT_LOGGED_IN',
                            'Unauthorized: missing token')
    try:
        return tokens.decode(token, _settings().jwt_secret).user_id
    except InvalidToken as e:
        logger.debug('Rejected token: %s', e)
        raise RequestFailed(HTTPStatus.UNAUTHORIZED, 'ERR_NOT_LOGGED_IN',
                            f'Unauthorized: {e}') from e


@blueprint.route('/create-account', methods=['POST'])
def create_account() -> Response:
    """Register a new account."""
    body = _body()
    _require(body, 'username', 'password', 'email', 'birthday')
    username, email = str(body['username']), str(body['email'])
    birthday = sanitize.parse_birthday(str(body['birthday']))
    if not sanitize.is_clean_username(username) \
            or not sanitize.is_clean_email(email) or birthday is None:
        raise RequestFailed(HTTPStatus.BAD_REQUEST, 'ERR_INVALID_FIELDS',
                            'Invalid characters or format in fields')

    password_hash = passwords.hash_password(str(body['password']),
                                            _settings().bcrypt_rounds)
    try:
        account_id = _directory().create_account(username, email,
                                                 password_hash, birthday)
    except DuplicateConflict as e:
        raise RequestFailed(HTTPStatus.CONFLICT,
                            f'ERR_DUPLICATE_{e.field.upper()}',
                            f'An account with that {e.field} already exists')
    return envelope(HTTPStatus.OK, 'SUCCESS_CREATE_ACCOUNT',
                    'Account created', userId=account_id)


@blueprint.route('/login', methods=['POST'])
def login() -> Response:
    """Check credentials and hand out a bearer token."""
    body = _body()
    _require(body, 'username', 'password')
    username = str(body['username'])
    try:
        account_id, config = _directory().authenticate(username,
                                                       str(body['password']))
    except AuthenticationFailed as e:
        raise RequestFailed(HTTPStatus.UNAUTHORIZED, 'ERR_INVALID_CREDENTIALS',
                            str(e))
    settings = _settings()
    token = tokens.encode(account_id, username, settings.jwt_secret,
                          settings.jwt_expiry)
    return envelope(HTTPStatus.OK, 'SUCCESS_LOGIN', 'Login successful',
                    token=token, config=config)


@blueprint.route('/get-account', methods=['POST'])
def get_account() -> Response:
    """Get the logged-in account, without its password hash."""
    account_id = _authorize(_body())
    try:
        account = _directory().get_account(account_id)
    except (NotFound, MalformedRecord) as e:
        logger.error('Failed to load account: %s', e)
        raise RequestFailed(HTTPStatus.NOT_FOUND, 'ERR_ACCOUNT_NOT_FOUND',
                            'Account not found')
    return envelope(HTTPStatus.OK, 'SUCCESS_GET_ACCOUNT', 'Account fetched',
                    account=account.to_public())


@blueprint.route('/get-config', methods=['POST'])
def get_config() -> Response:
    """Get the config of the logged-in account."""
    account_id = _authorize(_body())
    try:
        config = _directory().get_config(account_id)
    except (NotFound, MalformedRecord) as e:
        logger.error('Failed to load config: %s', e)
        raise RequestFailed(HTTPStatus.NOT_FOUND, 'ERR_CONFIG_NOT_FOUND',
                            'Config not found')
    return envelope(HTTPStatus.OK, 'SUCCESS_GET_CONFIG', 'Config fetched',
                    config=config)


@blueprint.route('/save-config', methods=['POST'])
def save_config() -> Response:
    """Replace the config of the logged-in account."""
    body = _body()
    account_id = _authorize(body)
    config = body.get('config')
    if not isinstance(config, dict):
        raise RequestFailed(HTTPStatus.BAD_REQUEST, 'ERR_MISSING_FIELDS',
                            'Missing fields')
    _directory().save_config(account_id, config)
    return envelope(HTTPStatus.OK, 'SUCCESS_SAVE_CONFIG', 'Config saved',
                    config=config)


@blueprint.route('/update-setting', methods=['POST'])
def update_setting() -> Response:
    """Set one config value for the logged-in account."""
    body = _body()
    account_id = _authorize(body)
    if 'key' not in body or 'value' not in body:
        raise RequestFailed(HTTPStatus.BAD_REQUEST, 'ERR_MISSING_FIELDS',
                            'Missing fields')
    try:
        config = _directory().update_setting(account_id, str(body['key']),
                                             body['value'])
    except (NotFound, MalformedRecord) as e:
        logger.error('Failed to update config: %s', e)
        raise RequestFailed(HTTPStatus.NOT_FOUND, 'ERR_CONFIG_NOT_FOUND',
                            'Config not found')
    return envelope(HTTPStatus.OK, 'SUCCESS_UPDATE_SETTING',
                    'Setting updated', config=config)
