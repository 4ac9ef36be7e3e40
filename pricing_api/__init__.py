from flask import Flask, jsonify

from .config import Config
from .extensions import cors


def create_app(config_object=Config):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)
    config_object.init_app(app)

    # Init extensions
    cors.init_app(app, resources={r"/pricing/*": {"origins": app.config["PRICING_CORS_ORIGINS"]}})

    # Register blueprints
    from .pricing import bp as pricing_bp; app.register_blueprint(pricing_bp)

    from .cli import register_cli
    register_cli(app)

    @app.get("/")
    def health():
        return jsonify(ok=True, msg="Pricing API running")

    app.logger.debug("blueprints: %s", sorted(app.blueprints.keys()))
    return app
