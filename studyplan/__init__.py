from flask import Flask

from .config import Config, DevelopmentConfig, ProductionConfig
from .extensions import cors, create_logger, db

logger = create_logger(__name__, level="INFO")


def create_app(config_class=None):
    """Application factory: wires extensions and blueprints onto a new Flask app."""
    if config_class is None:
        config_class = (
            ProductionConfig if Config.ENV == "production" else DevelopmentConfig
        )

    app = Flask(__name__)
    app.config.from_object(config_class)

    db.init_app(app)
    cors.init_app(app)

    from .busy_slot_routes import busy_slot_bp
    from .profile_routes import profile_bp
    from .routes import base_bp, schedule_bp, task_bp

    app.register_blueprint(base_bp)
    app.register_blueprint(task_bp)
    app.register_blueprint(schedule_bp)
    app.register_blueprint(busy_slot_bp)
    app.register_blueprint(profile_bp)

    logger.info(f"Created app with {config_class.__name__}")
    return app
