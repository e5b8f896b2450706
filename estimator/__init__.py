import os
import logging
from flask import Flask, redirect, url_for, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from dotenv import load_dotenv

from .config import DevConfig, ProdConfig, TestConfig

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()


def create_app(config_name: str | None = None) -> Flask:
    """Application factory with environment based configuration."""
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)
    os.makedirs(app.instance_path, exist_ok=True)

    # Pick configuration
    env = config_name or os.getenv('ENV') or os.getenv('FLASK_ENV') or 'production'
    cfg_cls = {'development': DevConfig, 'testing': TestConfig}.get(env, ProdConfig)
    app.config.from_object(cfg_cls)

    # Initialise logging
    logging.basicConfig(level=logging.DEBUG if app.debug else logging.INFO)

    db.init_app(app)
    migrate.init_app(app, db)

    # Ensure models loaded so tables can be created
    from estimator import models  # noqa
    with app.app_context():
        db.create_all()

    @app.route('/')
    def index():
        return redirect(url_for('estimates.list_estimates'))

    @app.errorhandler(404)
    def not_found(_):
        return jsonify(error='Not found'), 404

    @app.errorhandler(500)
    def server_error(_):
        return jsonify(error='Internal server error'), 500

    from estimator.settings.routes import bp as settings_bp
    from estimator.estimates.routes import bp as estimates_bp
    from estimator.cli import pricing_cli

    app.register_blueprint(settings_bp, url_prefix='/settings')
    app.register_blueprint(estimates_bp, url_prefix='/estimates')
    app.cli.add_command(pricing_cli)

    return app
