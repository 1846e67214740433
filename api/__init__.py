import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from .extensions import limiter
from models import storage  # DBStorage singleton (scoped_session)
from services import AuthServices

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Marketplace Auth API",
        "version": "1.0.0",
        "description": "Phone/OTP login, JWT access tokens and rotating refresh tokens for the marketplace.",
    },
    "basePath": "/",  # Blueprints are mounted under /api
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def create_app(config_name: str | None = None, overrides: dict | None = None, otp_transport=None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    `overrides` patches config keys (tests); `otp_transport` swaps the httpx
    transport used to reach the OTP provider.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Refresh cookie is sent cross-origin only with credentials
    origins = app.config.get("CORS_ORIGINS", "*")
    if origins != "*":
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    CORS(app, resources={r"/api/*": {"origins": origins}}, supports_credentials=origins != "*")

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    limiter.init_app(app)

    storage.reload(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))
    app.extensions["auth_services"] = AuthServices.from_config(app.config, storage, transport=otp_transport)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .commands import register_commands

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    register_commands(app)

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # This calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to the Marketplace API",
            "docs": "/apidocs/",
            "health": "/api/health",
        }, 200

    return app
