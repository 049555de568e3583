"""Tests for latency_dashboard.logging_config."""
import json
import logging
import os
from unittest.mock import patch

import pytest
from flask import Flask

from latency_dashboard.logging_config import configure_logging, JSONFormatter


@pytest.fixture(autouse=True)
def _reset_root_logger():
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_level = root.level
    original_handlers = root.handlers[:]
    yield
    root.setLevel(original_level)
    root.handlers = original_handlers


def _configure(**env):
    with patch.dict(os.environ, env):
        for key in ('LOG_LEVEL', 'LOG_FORMAT'):
            if key not in env:
                os.environ.pop(key, None)
        configure_logging()


class TestLevels:

    @pytest.mark.parametrize('env_value,expected', [
        (None, logging.INFO),
        ('DEBUG', logging.DEBUG),
        ('warning', logging.WARNING),
        ('NONSENSE', logging.INFO),
    ])
    def test_root_level_from_env(self, env_value, expected):
        if env_value is None:
            _configure()
        else:
            _configure(LOG_LEVEL=env_value)
        assert logging.getLogger().level == expected

    def test_library_loggers_quieted(self):
        _configure(LOG_LEVEL='DEBUG')
        for name in ('redis', 'sqlalchemy.engine', 'werkzeug', 'urllib3'):
            assert logging.getLogger(name).level == logging.WARNING

    def test_app_logger_follows_level(self):
        app = Flask('logging-test')
        with patch.dict(os.environ, {'LOG_LEVEL': 'ERROR'}):
            configure_logging(app)
        assert app.logger.level == logging.ERROR

    def test_single_handler_after_repeated_calls(self):
        _configure()
        _configure()
        assert len(logging.getLogger().handlers) == 1


class TestOutput:

    def test_text_format(self, capsys):
        _configure(LOG_FORMAT='text')
        logging.getLogger('services.benchmark_data').warning("store slow")
        output = capsys.readouterr().err
        assert 'WARNING services.benchmark_data' in output
        assert 'store slow' in output

    def test_json_format(self, capsys):
        _configure(LOG_FORMAT='json')
        logging.getLogger('services.circuit_breaker').info("Circuit '%s' reset", 'benchmark_db')
        parsed = json.loads(capsys.readouterr().err.strip())
        assert parsed['level'] == 'INFO'
        assert parsed['logger'] == 'services.circuit_breaker'
        assert parsed['message'] == "Circuit 'benchmark_db' reset"
        assert 'timestamp' in parsed
        assert 'exception' not in parsed

    def test_json_format_includes_exception(self, capsys):
        _configure(LOG_FORMAT='JSON')
        try:
            raise RuntimeError("connection refused")
        except RuntimeError:
            logging.getLogger('routes.dashboard').error("read failed", exc_info=True)
        parsed = json.loads(capsys.readouterr().err.strip())
        assert parsed['level'] == 'ERROR'
        assert 'RuntimeError: connection refused' in parsed['exception']


def test_formatter_interpolates_args():
    record = logging.LogRecord(
        name='test', level=logging.INFO, pathname='', lineno=0,
        msg='%d databases', args=(4,), exc_info=None,
    )
    assert json.loads(JSONFormatter().format(record))['message'] == '4 databases'


class TestRequestContext:

    def test_json_includes_request(self, capsys):
        _configure(LOG_FORMAT='json')
        app = Flask('logging-test')
        with app.test_request_context('/view/queries?value=warm'):
            logging.getLogger('routes.dashboard').info("Rejected view action")
        parsed = json.loads(capsys.readouterr().err.strip())
        assert parsed['method'] == 'GET'
        assert parsed['path'] == '/view/queries?value=warm'

    def test_text_appends_request(self, capsys):
        _configure(LOG_FORMAT='text')
        app = Flask('logging-test')
        with app.test_request_context('/history'):
            logging.getLogger('routes.dashboard').warning("slow")
        assert 'slow [GET /history]' in capsys.readouterr().err

    def test_outside_request_has_no_request_fields(self, capsys):
        _configure(LOG_FORMAT='json')
        logging.getLogger('scripts').warning("seeding")
        parsed = json.loads(capsys.readouterr().err.strip())
        assert 'path' not in parsed
