# backend/armory/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate



def create_app(config_object=Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.bases import bases_bp
    from .routes.assets import assets_bp
    from .routes.dashboard import dashboard_bp
    from .routes.purchases import purchases_bp
    from .routes.transfers import transfers_bp
    from .routes.assignments import assignments_bp
    from .routes.stocks import stocks_bp
    from .routes.users import users_bp
    from .routes.logs import logs_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(bases_bp)
    app.register_blueprint(assets_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(purchases_bp)
    app.register_blueprint(transfers_bp)
    app.register_blueprint(assignments_bp)
    app.register_blueprint(stocks_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(logs_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config.get("CORS_ALLOWED_ORIGINS", ()):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
