"""Web Server Gateway Interface entry-point."""

import os

from accountdir.factory import create_app

__flask_app__ = None


def application(environ, start_response):
    """WSGI application factory."""
    global __flask_app__
    for key, value in environ.items():
        if isinstance(value, str):
            os.environ[key] = value
    if __flask_app__ is None:
        __flask_app__ = create_app()
    return __flask_app__(environ, start_response)
