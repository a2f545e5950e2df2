"""
Flask Application Factory - College Lacrosse schedule & rankings API

Serves cached snapshots cheaply; ingestion runs only when a snapshot is
missing, a refresh is forced, or a (rate-limited) trigger endpoint is hit.

Routes:
- /api/health, /api/games, /api/rankings, /api/game-detail
- /api/track-click
- /api/scrape-games, /api/scrape-rankings
- /api/admin/status, /api/admin/cache-clear
"""

import logging

from flask import Flask, jsonify
from flask_cors import CORS

from config import Config


def configure_logging(level: str = "INFO") -> None:
    """Root logging setup shared by the app and the CLI."""
    from api.middleware import RequestIdLogFilter

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdLogFilter) for f in handler.filters):
            handler.addFilter(RequestIdLogFilter())


def create_app(runtime=None):
    """
    Build the Flask app.

    Args:
        runtime: Pre-built IngestionRuntime (tests); built from the
            environment when omitted.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    configure_logging(app.config["LOG_LEVEL"])

    # Initialize CORS - allow all origins (read-only public feed)
    CORS(app,
         resources={r"/api/*": {"origins": "*"}},
         methods=["GET", "POST", "OPTIONS"],
         allow_headers=["Content-Type", "X-Request-ID"],
         expose_headers=["X-Request-ID", "Retry-After"],
         supports_credentials=False,
         send_wildcard=True)

    # === API MIDDLEWARE ===
    from api.middleware import setup_error_handlers, setup_request_id_middleware
    setup_request_id_middleware(app)
    setup_error_handlers(app)

    from utils.rate_limiter import init_limiter
    init_limiter(app)

    # One ingestion runtime per process
    if runtime is None:
        from services.runtime import build_runtime
        runtime = build_runtime()
    from services.runtime import RUNTIME_EXTENSION
    app.extensions[RUNTIME_EXTENSION] = runtime

    # Register routes
    # Public feed (schedule, rankings, detail)
    from routes.feeds import feeds_bp
    app.register_blueprint(feeds_bp, url_prefix='/api')

    # Affiliate click tracking
    from routes.clicks import clicks_bp
    app.register_blueprint(clicks_bp, url_prefix='/api')

    # Manual ingestion triggers (rate limited)
    from routes.scrape import scrape_bp
    app.register_blueprint(scrape_bp, url_prefix='/api')

    # Admin (status, cache clear); authentication is handled upstream
    from routes.admin import admin_bp
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({
            "name": "College Lacrosse Schedule API",
            "status": "running",
            "cache": runtime.cache.status()["mode"],
        })

    return app


def run_app():
    """Main entry point for local development - starts server with Flask's dev server."""
    app = create_app()
    app.run(debug=app.config["DEBUG"], host="0.0.0.0", port=5000)


if __name__ == "__main__":
    run_app()
