"""
Flask application factory.

Creates and configures the Flask app, registers all blueprints.
"""
import importlib
import os

from flask import Flask


def _latency_ms(value):
    """Jinja2 filter: 12.3456 → '12.35ms', None → 'N/A'."""
    from latency_dashboard.services.latency_table import format_latency
    return format_latency(value)


def create_app():
    """Create and configure the Flask application."""
    from latency_dashboard.config import SECRET_KEY
    from latency_dashboard.logging_config import configure_logging

    app = Flask(
        __name__,
        template_folder=os.path.join(os.path.dirname(os.path.dirname(__file__)), 'templates'),
    )

    configure_logging(app)

    app.secret_key = SECRET_KEY
    app.jinja_env.filters['latency_ms'] = _latency_ms

    from latency_dashboard.routes.dashboard import bp as dashboard_bp
    from latency_dashboard.routes.api import bp as api_bp

    app.register_blueprint(dashboard_bp)
    app.register_blueprint(api_bp)

    # Circuit breaker guarding benchmark store reads
    from latency_dashboard import extensions
    from latency_dashboard.services.circuit_breaker import init_breakers
    init_breakers(extensions.redis_client)

    # Import models so Base.metadata knows about them.
    # Schema is managed by Alembic — no create_all() call.
    importlib.import_module('latency_dashboard.models.function')
    importlib.import_module('latency_dashboard.models.target_database')
    importlib.import_module('latency_dashboard.models.stat')

    return app
