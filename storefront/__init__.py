from flask import Flask
from dotenv import load_dotenv

load_dotenv()


def create_app(config_name=None):
    """Build the shop app; ``config_name`` overrides the environment choice."""
    from storefront.config import get_config

    config_cls = get_config(config_name)
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_cls)
    if hasattr(config_cls, "init_app"):
        config_cls.init_app(flask_app)

    from storefront.extensions import db, init_redis, migrate

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    init_redis(flask_app)

    # Model classes must be registered on db.metadata before create_all/migrate
    import storefront.models  # noqa: F401

    from storefront.blueprints.admin_api import admin_api_bp
    from storefront.blueprints.public import public_bp
    from storefront.blueprints.telegram import telegram_bp

    for blueprint, prefix in (
        (public_bp, None),
        (admin_api_bp, "/admin/api"),
        (telegram_bp, "/telegram"),
    ):
        flask_app.register_blueprint(blueprint, url_prefix=prefix)

    from storefront.cli import register_cli

    register_cli(flask_app)
    _register_health(flask_app)

    return flask_app


def _register_health(flask_app):
    from storefront import extensions
    from storefront.extensions import db

    @flask_app.route("/health")
    def health():
        checks = {"status": "ok", "queue": extensions.task_queue.name}
        try:
            db.session.execute(db.text("SELECT 1"))
            checks["db"] = "ok"
        except Exception:
            flask_app.logger.exception("Health check DB probe failed")
            checks["db"] = "error"
            checks["status"] = "degraded"
        try:
            if extensions.redis_client:
                extensions.redis_client.ping()
                checks["redis"] = "ok"
            else:
                checks["redis"] = "not configured"
        except Exception:
            flask_app.logger.exception("Health check Redis probe failed")
            checks["redis"] = "error"
            checks["status"] = "degraded"
        return checks, 200 if checks["status"] == "ok" else 503
