"""
Logging setup for the dashboard.

configure_logging() runs once from create_app(). LOG_FORMAT picks a
human-readable text line or one JSON object per line; LOG_LEVEL defaults to
INFO. Records emitted while a request is being handled carry its method and
path, so a "data unavailable" line can be tied to the page that hit it.
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone

from flask import has_request_context, request

TEXT_FORMAT = '[%(asctime)s] %(levelname)s %(name)s — %(message)s%(request_suffix)s'
TEXT_DATEFMT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that are noisy at INFO
_NOISY_LOGGERS = [
    'urllib3',
    'redis',
    'sqlalchemy.engine',
    'werkzeug',
]


class RequestContextFilter(logging.Filter):
    """Attach method/path of the current Flask request, if any."""

    def filter(self, record):
        if has_request_context():
            record.method = request.method
            record.path = request.full_path.rstrip('?')
            record.request_suffix = f' [{record.method} {record.path}]'
        else:
            record.method = None
            record.path = None
            record.request_suffix = ''
        return True


class JSONFormatter(logging.Formatter):
    """Single-line JSON log formatter for production log aggregators."""

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        if getattr(record, 'path', None):
            entry['method'] = record.method
            entry['path'] = record.path
        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _level_from_env():
    level = logging.getLevelName(os.getenv('LOG_LEVEL', 'INFO').upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(app=None):
    level = _level_from_env()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    if os.getenv('LOG_FORMAT', 'text').lower() == 'json':
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if app is not None:
        app.logger.setLevel(level)
